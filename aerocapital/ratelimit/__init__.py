"""
Request rate limiting.

Responsibilities:
- Count requests per client and endpoint inside a fixed time window.
- Keep counters in an injectable store so a shared cache can replace the
  in-process map when the API runs in several processes.
- Resolve the client address from proxy headers.
"""

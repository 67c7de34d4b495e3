from __future__ import annotations

import logging
import os
from typing import Any

from fastapi import (
    BackgroundTasks,
    Body,
    Depends,
    FastAPI,
    HTTPException,
    Query,
    Request,
    Response,
)
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_dashboard
from .analytics.store import get_events, record_event
from .auth.dependencies import get_current_user, require_admin, require_user
from .auth.models import LoginRequest
from .auth.users import authenticate
from .inquiries.models import (
    Inquiry,
    InquiryCreatedResponse,
    InquiryReceipt,
    InquiryRequest,
    InquiryStatus,
    InquiryUpdate,
)
from .inquiries.notifier import EmailNotifier, get_notifier
from .inquiries.store import InquiryNotFoundError, InquiryStore, get_inquiry_store
from .listings.data_store import (
    AircraftNotFoundError,
    AircraftRepository,
    DuplicateSlugError,
    get_repository,
)
from .listings.models import (
    AircraftCategory,
    AircraftCreate,
    AircraftRecord,
    AircraftStatus,
    AircraftUpdate,
    FilterState,
    ListingPage,
    SimilarAircraftResponse,
    SortKey,
)
from .listings.pipeline import PAGE_SIZE, build_listing_page
from .listings.similarity import DEFAULT_LIMIT, similar_aircraft
from .ratelimit.limiter import (
    PRESETS,
    RateLimiter,
    RateLimitResult,
    get_client_ip,
    get_rate_limiter,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Aircraft Sales & Financing API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "aerocapital-secret-change-in-production"),
)


def _public_or_404(repo: AircraftRepository, slug: str) -> AircraftRecord:
    try:
        aircraft = repo.get_by_slug(slug)
    except AircraftNotFoundError:
        raise HTTPException(status_code=404, detail="Aircraft not found")
    if aircraft.status == AircraftStatus.draft:
        raise HTTPException(status_code=404, detail="Aircraft not found")
    return aircraft


def _too_many_requests(result: RateLimitResult, endpoint: str) -> HTTPException:
    record_event("rate_limited", {"endpoint": endpoint})
    return HTTPException(
        status_code=429,
        detail={
            "error": "Too many requests",
            "message": "Rate limit exceeded. Please try again after "
            f"{result.reset_at.strftime('%H:%M:%S')} UTC.",
            "retry_after": result.reset_at.isoformat(),
        },
        headers=result.headers(),
    )


def _rate_limited(
    limiter: RateLimiter, request: Request, endpoint: str, preset: str,
) -> dict[str, str]:
    """Count the request; raise 429 when over the limit, else return headers."""
    result = limiter.check(get_client_ip(request), endpoint, PRESETS[preset])
    if not result.success:
        raise _too_many_requests(result, endpoint)
    return result.headers()


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata(repo: AircraftRepository = Depends(get_repository)) -> dict:
    listed = [a for a in repo.list_all() if a.status != AircraftStatus.draft]
    years = [a.year_manufactured for a in listed]
    return {
        "categories": [{"value": c.value, "label": c.label} for c in AircraftCategory],
        "statuses": [
            {"value": s.value, "label": s.label}
            for s in AircraftStatus if s != AircraftStatus.draft
        ],
        "sort_options": [s.value for s in SortKey],
        "manufacturers": sorted({a.manufacturer for a in listed}),
        "year_range": [min(years), max(years)] if years else None,
        "page_size": PAGE_SIZE,
    }


@app.get("/aircraft", response_model=ListingPage)
def list_aircraft(
    request: Request,
    response: Response,
    search: str = Query(default="", max_length=200),
    category: list[AircraftCategory] = Query(default=[]),
    status: list[AircraftStatus] = Query(default=[]),
    min_price: float | None = Query(default=None, ge=0),
    max_price: float | None = Query(default=None, ge=0),
    min_year: int | None = None,
    max_year: int | None = None,
    sort_by: SortKey = SortKey.newest,
    page: int = Query(default=1, ge=1),
    repo: AircraftRepository = Depends(get_repository),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> ListingPage:
    response.headers.update(_rate_limited(limiter, request, "aircraft", "search"))

    filters = FilterState(
        search=search,
        categories=category,
        statuses=status,
        min_price=min_price,
        max_price=max_price,
        min_year=min_year,
        max_year=max_year,
        sort_by=sort_by,
    )
    result = build_listing_page(repo.list_all(), filters, page)

    record_event("search", {
        "search": filters.search,
        "categories": [c.value for c in filters.categories],
        "statuses": [s.value for s in filters.statuses],
        "active_filters": filters.active_filters(),
        "sort_by": filters.sort_by.value,
        "page": page,
        "total_results": result.total,
    })
    return result


@app.get("/aircraft/{slug}", response_model=AircraftRecord)
def aircraft_detail(
    slug: str, repo: AircraftRepository = Depends(get_repository),
) -> AircraftRecord:
    aircraft = _public_or_404(repo, slug)
    return repo.increment_views(aircraft.id)


@app.get("/aircraft/{slug}/similar", response_model=SimilarAircraftResponse)
def aircraft_similar(
    slug: str,
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=PAGE_SIZE),
    repo: AircraftRepository = Depends(get_repository),
) -> SimilarAircraftResponse:
    reference = _public_or_404(repo, slug)
    items = similar_aircraft(reference, repo.list_all(), limit)
    return SimilarAircraftResponse(reference_id=reference.id, items=items)


@app.post("/inquiries", status_code=201, response_model=InquiryCreatedResponse)
def submit_inquiry(
    request: Request,
    response: Response,
    background_tasks: BackgroundTasks,
    payload: dict[str, Any] = Body(...),
    repo: AircraftRepository = Depends(get_repository),
    store: InquiryStore = Depends(get_inquiry_store),
    notifier: EmailNotifier = Depends(get_notifier),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> InquiryCreatedResponse:
    # Rate limiting counts every attempt, including invalid ones.
    response.headers.update(_rate_limited(limiter, request, "inquiries", "contact_form"))

    try:
        body = InquiryRequest.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False))

    aircraft = None
    if body.aircraft_id:
        try:
            aircraft = repo.get(body.aircraft_id)
        except AircraftNotFoundError:
            raise HTTPException(status_code=422, detail="Unknown aircraft_id")
        if aircraft.deleted_at is not None or aircraft.status == AircraftStatus.draft:
            raise HTTPException(status_code=422, detail="Unknown aircraft_id")

    client_ip = get_client_ip(request)
    user = get_current_user(request)
    inquiry = store.create(
        body,
        user=user["username"] if user else None,
        ip_address=client_ip if client_ip != "unknown" else None,
        user_agent=request.headers.get("user-agent"),
    )
    logger.info("Inquiry %s received (%s)", inquiry.id, inquiry.inquiry_type.value)

    background_tasks.add_task(notifier.notify_inquiry, inquiry, aircraft)

    record_event("inquiry", {
        "inquiry_type": inquiry.inquiry_type.value,
        "aircraft_id": inquiry.aircraft_id,
    })
    return InquiryCreatedResponse(
        inquiry=InquiryReceipt(id=inquiry.id, created_at=inquiry.created_at),
    )


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(
    body: LoginRequest,
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> dict:
    # A locked-out client is refused before the password is checked.
    lockout = limiter.peek(get_client_ip(request), "auth", PRESETS["auth"])
    if not lockout.success:
        raise _too_many_requests(lockout, "auth")

    user = authenticate(body.username, body.password)
    if not user:
        # Only failed attempts count towards the lockout.
        _rate_limited(limiter, request, "auth", "auth")
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── User endpoints ───────────────────────────────────────────────────────


@app.get("/inquiries/mine", response_model=list[Inquiry])
def my_inquiries(
    user: dict = Depends(require_user),
    store: InquiryStore = Depends(get_inquiry_store),
) -> list[Inquiry]:
    return store.list_all(user=user["username"])


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/admin/aircraft", response_model=list[AircraftRecord])
def admin_list_aircraft(
    include_deleted: bool = False,
    user: dict = Depends(require_admin),
    repo: AircraftRepository = Depends(get_repository),
) -> list[AircraftRecord]:
    return repo.list_all(include_deleted=include_deleted)


@app.post("/admin/aircraft", status_code=201, response_model=AircraftRecord)
def admin_create_aircraft(
    body: AircraftCreate,
    user: dict = Depends(require_admin),
    repo: AircraftRepository = Depends(get_repository),
) -> AircraftRecord:
    try:
        return repo.create(body, created_by=user["username"])
    except DuplicateSlugError:
        raise HTTPException(status_code=409, detail=f"Slug '{body.slug}' is already in use")


@app.put("/admin/aircraft/{aircraft_id}", response_model=AircraftRecord)
def admin_update_aircraft(
    aircraft_id: str,
    body: AircraftUpdate,
    user: dict = Depends(require_admin),
    repo: AircraftRepository = Depends(get_repository),
) -> AircraftRecord:
    try:
        return repo.update(aircraft_id, body)
    except AircraftNotFoundError:
        raise HTTPException(status_code=404, detail="Aircraft not found")
    except DuplicateSlugError:
        raise HTTPException(status_code=409, detail=f"Slug '{body.slug}' is already in use")


@app.delete("/admin/aircraft/{aircraft_id}")
def admin_delete_aircraft(
    aircraft_id: str,
    hard: bool = False,
    user: dict = Depends(require_admin),
    repo: AircraftRepository = Depends(get_repository),
) -> dict:
    try:
        repo.delete(aircraft_id, soft=not hard)
    except AircraftNotFoundError:
        raise HTTPException(status_code=404, detail="Aircraft not found")
    return {"status": "deleted", "id": aircraft_id, "hard": hard}


@app.get("/admin/inquiries", response_model=list[Inquiry])
def admin_list_inquiries(
    status: InquiryStatus | None = None,
    user: dict = Depends(require_admin),
    store: InquiryStore = Depends(get_inquiry_store),
) -> list[Inquiry]:
    return store.list_all(status=status)


@app.patch("/admin/inquiries/{inquiry_id}", response_model=Inquiry)
def admin_update_inquiry(
    inquiry_id: str,
    body: InquiryUpdate,
    user: dict = Depends(require_admin),
    store: InquiryStore = Depends(get_inquiry_store),
) -> Inquiry:
    try:
        inquiry = store.get(inquiry_id)
        if body.status is not None:
            inquiry = store.update_status(inquiry_id, body.status)
        if body.priority is not None:
            inquiry = store.update_priority(inquiry_id, body.priority)
        if body.admin_notes is not None:
            inquiry = store.update_notes(inquiry_id, body.admin_notes)
    except InquiryNotFoundError:
        raise HTTPException(status_code=404, detail="Inquiry not found")
    return inquiry


@app.delete("/admin/inquiries/{inquiry_id}")
def admin_delete_inquiry(
    inquiry_id: str,
    user: dict = Depends(require_admin),
    store: InquiryStore = Depends(get_inquiry_store),
) -> dict:
    try:
        store.delete(inquiry_id)
    except InquiryNotFoundError:
        raise HTTPException(status_code=404, detail="Inquiry not found")
    return {"status": "deleted", "id": inquiry_id}


@app.get("/admin/dashboard")
def admin_dashboard(
    user: dict = Depends(require_admin),
    repo: AircraftRepository = Depends(get_repository),
    store: InquiryStore = Depends(get_inquiry_store),
) -> dict:
    return compute_dashboard(repo.list_all(), store.list_all(), get_events())

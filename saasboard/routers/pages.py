"""HTML page routes — public pages and the signed-in dashboard."""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from saasboard.db.session import get_db
from saasboard.models.enums import Plan
from saasboard.models.user import User
from saasboard.services import analytics_service
from saasboard.services.auth_service import get_optional_user

router = APIRouter(tags=["pages"])


def _render(request: Request, template: str, context: dict) -> HTMLResponse:
    return request.app.state.templates.TemplateResponse(request, template, context)


def _login_redirect() -> RedirectResponse:
    return RedirectResponse(url="/login", status_code=303)


@router.get("/", response_class=HTMLResponse)
async def landing(request: Request, user: User | None = Depends(get_optional_user)):
    return _render(request, "landing.html", {"user": user})


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request):
    return _render(request, "login.html", {})


@router.get("/register", response_class=HTMLResponse)
async def register_page(request: Request):
    return _render(request, "register.html", {})


@router.get("/app/dashboard", response_class=HTMLResponse)
async def dashboard(
    request: Request,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
    success: bool = Query(False),
):
    if not user:
        return _login_redirect()

    summary = await analytics_service.summary(db, user.id)
    recent = await analytics_service.list_events(db, user.id, limit=10)
    return _render(
        request,
        "dashboard/index.html",
        {
            "user": user,
            "subscription": user.subscription,
            "summary": summary,
            "recent_events": recent,
            "checkout_success": success,
        },
    )


@router.get("/app/analytics", response_class=HTMLResponse)
async def analytics_page(
    request: Request,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
    days: int = Query(30, ge=1, le=365),
):
    if not user:
        return _login_redirect()

    return _render(
        request,
        "dashboard/analytics.html",
        {
            "user": user,
            "days": days,
            "top_events": await analytics_service.top_events(db, user.id),
            "daily": await analytics_service.daily_buckets(db, user.id, days),
            "summary": await analytics_service.summary(db, user.id),
        },
    )


@router.get("/app/billing", response_class=HTMLResponse)
async def billing_page(
    request: Request,
    user: User | None = Depends(get_optional_user),
    canceled: bool = Query(False),
):
    if not user:
        return _login_redirect()

    settings = request.app.state.settings
    plans = [(plan, price_id) for price_id, plan in settings.price_plan_map().items()]
    return _render(
        request,
        "dashboard/billing.html",
        {
            "user": user,
            "subscription": user.subscription,
            "plans": plans,
            "free_plan": Plan.FREE,
            "checkout_canceled": canceled,
        },
    )


@router.get("/app/settings", response_class=HTMLResponse)
async def settings_page(request: Request, user: User | None = Depends(get_optional_user)):
    if not user:
        return _login_redirect()
    return _render(request, "dashboard/settings.html", {"user": user})

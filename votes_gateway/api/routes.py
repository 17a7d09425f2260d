"""
FastAPI routes for the Trakt votes gateway.
"""

from __future__ import annotations

import logging
import uuid
from http import HTTPStatus
from typing import Annotated, Any, Iterable, Optional, Tuple
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from votes_gateway.addon import build_manifest, build_meta, build_streams
from votes_gateway.api.pages import render_page
from votes_gateway.dependencies import (
    get_app_settings,
    get_credential_manager,
    get_ratings_service,
    get_trakt_oauth_client,
)
from votes_gateway.exceptions import (
    AuthExchangeError,
    InvalidRatingError,
    NoCredentialError,
    RatingSubmitError,
    RefreshError,
    TokenStoreError,
)
from votes_gateway.models.ratings import PRESET_SCORES, ItemType, normalize_external_id
from votes_gateway.services.ratings import build_submission

router = APIRouter()
logger = logging.getLogger(__name__)

USER_COOKIE = "trakt_votes_user"
USER_COOKIE_MAX_AGE = 60 * 60 * 24 * 365


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "").lower()


def _resolve_user(request: Request, user: Optional[str]) -> Optional[str]:
    """Explicit ``user`` parameter first, then the browser cookie."""
    candidate = (user or "").strip() or request.cookies.get(USER_COOKIE, "").strip()
    return candidate or None


def _remember_user(response: Response, user_id: str) -> None:
    response.set_cookie(
        USER_COOKIE,
        user_id,
        max_age=USER_COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
    )


def _safe_redirect(target: Optional[str]) -> str:
    """Only local absolute paths are followed."""
    if not target or not target.startswith("/") or target.startswith("//") or "\\" in target:
        return "/"
    return target


def _with_user(target: str, user_id: str) -> str:
    separator = "&" if "?" in target else "?"
    return f"{target}{separator}{urlencode({'user': user_id})}"


def _reply(
    request: Request,
    payload: dict[str, Any],
    *,
    title: str,
    message: str,
    status_code: int = HTTPStatus.OK,
    links: Optional[Iterable[Tuple[str, str]]] = None,
) -> Response:
    """JSON for API clients, a small HTML page for browsers."""
    if _wants_html(request):
        return HTMLResponse(
            render_page(title, message, links), status_code=status_code
        )
    return JSONResponse(content=payload, status_code=status_code)


def _not_connected(request: Request, base_url: str, user_id: Optional[str]) -> Response:
    authorize_url = f"{base_url}/authorize"
    if user_id:
        authorize_url = _with_user(authorize_url, user_id)
    return _reply(
        request,
        {"status": "not_connected", "authorize_url": authorize_url},
        title="Trakt not connected",
        message="Connect your Trakt account before voting.",
        status_code=HTTPStatus.UNAUTHORIZED,
        links=[("Connect Trakt", authorize_url)],
    )


def _store_unavailable(request: Request) -> Response:
    return _reply(
        request,
        {"status": "error", "detail": "Credential storage is unavailable."},
        title="Storage unavailable",
        message="Your Trakt credentials could not be updated. Try again later.",
        status_code=HTTPStatus.SERVICE_UNAVAILABLE,
    )


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/")
async def landing(
    request: Request,
    settings: Annotated[Any, Depends(get_app_settings)],
) -> Response:
    manifest_url = f"{settings.addon_base_url}/manifest.json"
    install_url = "stremio://" + manifest_url.split("://", 1)[-1]
    return _reply(
        request,
        {"name": build_manifest()["name"], "manifest": manifest_url},
        title="Trakt Votes",
        message="Install the add-on in Stremio, then connect your Trakt account.",
        links=[("Install in Stremio", install_url), ("Connect Trakt", "/start?redirect=/authorize")],
    )


@router.get("/start")
async def start_session(
    request: Request,
    user: Optional[str] = Query(default=None, description="Existing user identifier."),
    redirect: str = Query(default="/", description="Local path to continue to."),
) -> RedirectResponse:
    """Make sure the browser holds a user identifier, then continue."""
    user_id = _resolve_user(request, user) or uuid.uuid4().hex
    target = _with_user(_safe_redirect(redirect), user_id)
    response = RedirectResponse(url=target, status_code=HTTPStatus.TEMPORARY_REDIRECT)
    _remember_user(response, user_id)
    return response


@router.get("/authorize")
async def start_trakt_oauth_flow(
    request: Request,
    oauth_client: Annotated[Any, Depends(get_trakt_oauth_client)],
    user: Optional[str] = Query(default=None, description="User identifier to connect."),
) -> Response:
    """Send the browser to the Trakt consent screen; ``state`` is the user id."""
    if not oauth_client.is_configured:
        return _reply(
            request,
            {"status": "error", "detail": "Trakt OAuth is not configured."},
            title="Trakt not configured",
            message="This gateway has no Trakt client credentials.",
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
        )

    user_id = _resolve_user(request, user) or uuid.uuid4().hex
    authorization_url = oauth_client.build_authorization_url(state=user_id)
    response = RedirectResponse(
        url=authorization_url, status_code=HTTPStatus.TEMPORARY_REDIRECT
    )
    _remember_user(response, user_id)
    return response


@router.get("/callback")
async def handle_trakt_oauth_callback(
    request: Request,
    credentials: Annotated[Any, Depends(get_credential_manager)],
    code: Optional[str] = Query(default=None, description="Authorization code from Trakt."),
    state: Optional[str] = Query(default=None, description="User identifier sent as state."),
) -> Response:
    """Complete the OAuth exchange and store tokens for the user in ``state``."""
    if not code or not state:
        return _reply(
            request,
            {"status": "error", "detail": "Missing code or state."},
            title="Authorization failed",
            message="Trakt did not return an authorization code.",
            status_code=HTTPStatus.BAD_REQUEST,
        )

    try:
        await credentials.exchange_code(code, state)
    except AuthExchangeError as exc:
        logger.error("Code exchange failed for user %s: %s", state, exc.message)
        return _reply(
            request,
            {"status": "error", "detail": "Failed to exchange authorization code."},
            title="Authorization failed",
            message="Trakt refused the authorization. Please try again.",
            status_code=HTTPStatus.BAD_GATEWAY,
        )
    except TokenStoreError:
        return _store_unavailable(request)

    response = _reply(
        request,
        {"status": "connected", "user": state},
        title="Trakt connected",
        message="You can go back to Stremio and vote.",
    )
    _remember_user(response, state)
    return response


@router.get("/vote/{item_type}/{external_id}/{score}")
async def submit_vote(
    request: Request,
    item_type: str,
    external_id: str,
    score: int,
    ratings: Annotated[Any, Depends(get_ratings_service)],
    settings: Annotated[Any, Depends(get_app_settings)],
    user: Optional[str] = Query(default=None, description="User identifier."),
) -> Response:
    """Record a rating on Trakt for the resolved user."""
    try:
        submission = build_submission(item_type, external_id, score)
    except InvalidRatingError as exc:
        return _reply(
            request,
            {"status": "error", "detail": str(exc)},
            title="Invalid vote",
            message=str(exc),
            status_code=HTTPStatus.BAD_REQUEST,
        )

    user_id = _resolve_user(request, user)
    if not user_id:
        return _not_connected(request, settings.addon_base_url, None)

    try:
        result = await ratings.submit_rating(
            user_id,
            submission.item_type.value,
            submission.external_id,
            submission.score,
        )
    except (NoCredentialError, RefreshError) as exc:
        logger.info("Vote from user %s refused: %s", user_id, exc)
        return _not_connected(request, settings.addon_base_url, user_id)
    except RatingSubmitError as exc:
        return _reply(
            request,
            {"status": "error", "detail": exc.detail},
            title="Vote failed",
            message=f"Trakt rejected the vote: {exc.detail}",
            status_code=HTTPStatus.BAD_GATEWAY,
        )
    except TokenStoreError:
        return _store_unavailable(request)

    return _reply(
        request,
        {
            "status": "rated",
            "item_type": submission.item_type.value,
            "external_id": submission.external_id,
            "score": submission.score,
            "trakt": result,
        },
        title="Vote recorded",
        message=f"{submission.external_id} rated {submission.score}/10 on Trakt.",
    )


@router.get("/view/{external_id}")
async def view_rating(
    request: Request,
    external_id: str,
    credentials: Annotated[Any, Depends(get_credential_manager)],
    ratings: Annotated[Any, Depends(get_ratings_service)],
    settings: Annotated[Any, Depends(get_app_settings)],
    user: Optional[str] = Query(default=None, description="User identifier."),
    host_type: str = Query(
        default="movie", alias="type", description="movie, show or series."
    ),
) -> Response:
    """Show the user's current rating and one-click vote links."""
    external_id = normalize_external_id(external_id)
    user_id = _resolve_user(request, user)

    try:
        item_type = ItemType.from_host_type(host_type).value
    except ValueError:
        detail = f"Unsupported item type: {host_type!r}"
        return _reply(
            request,
            {"status": "error", "detail": detail},
            title="Invalid item",
            message=detail,
            status_code=HTTPStatus.BAD_REQUEST,
        )

    rating: Optional[int] = None
    connected = False
    if user_id:
        try:
            connected = await credentials.is_connected(user_id)
            rating = await ratings.lookup_rating(user_id, item_type, external_id)
        except RefreshError as exc:
            logger.info("Rating lookup for user %s needs re-authorization: %s", user_id, exc)
            connected = False
        except TokenStoreError:
            return _store_unavailable(request)

    base_url = settings.addon_base_url
    votes = []
    for label, score in PRESET_SCORES:
        url = f"{base_url}/vote/{item_type}/{external_id}/{score}"
        if user_id:
            url = _with_user(url, user_id)
        votes.append({"label": label, "score": score, "url": url})

    links = [(f"{vote['label']} ({vote['score']}/10)", vote["url"]) for vote in votes]
    if not connected:
        authorize_url = f"{base_url}/authorize"
        if user_id:
            authorize_url = _with_user(authorize_url, user_id)
        links.append(("Connect Trakt", authorize_url))

    message = (
        f"Your rating: {rating}/10" if rating is not None else "You have not rated this yet."
    )
    if not connected:
        message = "Trakt is not connected."

    return _reply(
        request,
        {
            "external_id": external_id,
            "item_type": item_type,
            "rating": rating,
            "connected": connected,
            "votes": votes,
        },
        title=external_id,
        message=message,
        links=links,
    )


@router.get("/logout")
async def logout(
    request: Request,
    credentials: Annotated[Any, Depends(get_credential_manager)],
    user: Optional[str] = Query(default=None, description="User identifier."),
) -> Response:
    """Forget the stored Trakt credential for the user."""
    user_id = _resolve_user(request, user)
    if user_id:
        try:
            await credentials.disconnect(user_id)
        except TokenStoreError:
            return _store_unavailable(request)

    response = _reply(
        request,
        {"status": "disconnected"},
        title="Disconnected",
        message="Your Trakt credentials were removed.",
    )
    response.delete_cookie(USER_COOKIE)
    return response


@router.get("/manifest.json")
async def addon_manifest() -> dict:
    return build_manifest()


@router.get("/meta/{host_type}/{item_id}.json")
async def addon_meta(host_type: str, item_id: str) -> dict:
    return build_meta(host_type, item_id)


@router.get("/stream/{host_type}/{item_id}.json")
async def addon_streams(
    host_type: str,
    item_id: str,
    settings: Annotated[Any, Depends(get_app_settings)],
) -> dict:
    """Action cards for an item; unknown content types get none."""
    try:
        return build_streams(settings.addon_base_url, host_type, item_id)
    except ValueError:
        return {"streams": []}


__all__ = ["router", "USER_COOKIE"]

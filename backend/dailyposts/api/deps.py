"""FastAPI dependencies shared by the routers."""

from fastapi import Cookie, Depends, Request

from dailyposts.core.context import AppContext
from dailyposts.core.errors import AuthError, AuthzError
from dailyposts.core.security import SESSION_COOKIE


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def current_uid(
    session: str | None = Cookie(default=None, alias=SESSION_COOKIE),
    ctx: AppContext = Depends(get_context),
) -> int:
    """User id of the valid session cookie, AuthError otherwise."""
    if not session:
        raise AuthError("no session cookie")
    return ctx.tokens.verify(session)


def is_admin(uid: int = Depends(current_uid), ctx: AppContext = Depends(get_context)) -> bool:
    return ctx.tokens.is_admin(uid)


def require_admin(admin: bool = Depends(is_admin)) -> None:
    if not admin:
        raise AuthzError("Admin rights required")

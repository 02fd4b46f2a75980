"""Login, logout and the session probe used by the client on page load."""

import logging

from fastapi import APIRouter, Cookie, Depends, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from dailyposts.api.deps import get_context
from dailyposts.core.context import AppContext
from dailyposts.core.errors import AuthError, AuthzError
from dailyposts.core.security import SESSION_COOKIE, check_password, clear_session_cookie
from dailyposts.models.user import User

router = APIRouter()
logger = logging.getLogger(__name__)


class LoginBody(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user: str
    password: str


@router.post("/login")
async def login(body: LoginBody, response: Response, ctx: AppContext = Depends(get_context)):
    users = ctx.mapper.select(User, "users", "name = ? LIMIT 1", body.user)

    if len(users) != 1 or not check_password(body.password, users[0].password):
        logger.info(f"Failed login for {body.user!r}")
        raise AuthError("Unknown user or wrong password")

    user = users[0]
    token = ctx.tokens.issue({"uid": user.uid})
    ctx.tokens.set_session_cookie(response, token)

    return {"uid": user.uid, "name": user.name, "admin": user.admin, "logged_in": True}


@router.get("/logout")
async def logout(response: Response):
    clear_session_cookie(response)
    return {"logged_in": False}


@router.get("/welcome")
async def welcome(
    session: str | None = Cookie(default=None, alias=SESSION_COOKIE),
    ctx: AppContext = Depends(get_context),
):
    if not session:
        return {"uid": 0, "admin": False, "logged_in": False}

    uid = ctx.tokens.verify(session)
    users = ctx.mapper.select(User, "users", "uid = ? LIMIT 1", uid)
    if len(users) != 1:
        logger.warning(f"Session for unknown user {uid}")
        denied = JSONResponse(status_code=403, content=AuthzError("unknown user").to_response())
        clear_session_cookie(denied)
        return denied

    return {"uid": users[0].uid, "admin": users[0].admin, "logged_in": True}

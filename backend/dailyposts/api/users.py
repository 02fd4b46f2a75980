"""REST API for user administration (admins only)."""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from dailyposts.api.deps import current_uid, get_context, require_admin
from dailyposts.core.context import AppContext
from dailyposts.core.errors import AuthError, AuthzError, ConflictError, NotFoundError, ValidationError
from dailyposts.core.mapper import RecordMapper
from dailyposts.core.security import hash_password
from dailyposts.models.user import AdminPatch, NameFilter, NewUser, PasswordPatch, UidFilter, User, UserName

router = APIRouter(dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)

ADMIN_NAME = "admin"


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    password: str


class UserUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    password: str = ""
    admin: bool | None = None


def _list_users(mapper: RecordMapper) -> list[dict]:
    return [{"uid": u.uid, "name": u.name, "admin": u.admin} for u in mapper.select(User, "users")]


def _one_user(mapper: RecordMapper, uid: int) -> User:
    users = mapper.select(User, "users", "uid = ?", uid)
    if len(users) != 1:
        raise NotFoundError(f"user {uid} not found")
    return users[0]


def _requesting_user(mapper: RecordMapper, uid: int) -> UserName:
    users = mapper.select(UserName, "users", "uid = ?", uid)
    if len(users) != 1:
        raise AuthError(f"session user {uid} doesn't exist")
    return users[0]


@router.get("")
async def get_users(ctx: AppContext = Depends(get_context)):
    return _list_users(ctx.mapper)


@router.post("")
async def create_user(body: UserCreate, ctx: AppContext = Depends(get_context)):
    if not body.name or not body.password:
        raise ValidationError("name and password are required")

    if ctx.mapper.count("users", NameFilter(name=body.name)) != 0:
        logger.debug(f"User with name {body.name!r} already exists")
        raise ConflictError(f"user {body.name!r} already exists")

    ctx.mapper.insert("users", NewUser(name=body.name, password=hash_password(body.password)))
    return _list_users(ctx.mapper)


@router.patch("")
async def update_user(
    uid: int,
    body: UserUpdate,
    request_uid: int = Depends(current_uid),
    ctx: AppContext = Depends(get_context),
):
    with ctx.mapper.transaction() as tx:
        target = _one_user(tx, uid)
        requester = _requesting_user(tx, request_uid)
        is_self = requester.name == target.name

        if body.password:
            if target.name == ADMIN_NAME and requester.name != ADMIN_NAME:
                raise AuthzError(f'password of user "{ADMIN_NAME}" can only be changed by itself')
            if is_self and requester.name != ADMIN_NAME:
                raise AuthzError("can't change own password")
            tx.update("users", PasswordPatch(password=hash_password(body.password)), UidFilter(uid=target.uid))

        if body.admin is not None and body.admin != target.admin:
            if target.name == ADMIN_NAME:
                raise AuthzError(f'"{ADMIN_NAME}" can\'t be demoted')
            if is_self:
                raise AuthzError("can't change own admin rights")
            tx.update("users", AdminPatch(admin=body.admin), UidFilter(uid=target.uid))

    return _list_users(ctx.mapper)


@router.delete("")
async def delete_user(
    uid: int,
    request_uid: int = Depends(current_uid),
    ctx: AppContext = Depends(get_context),
):
    target = _one_user(ctx.mapper, uid)
    requester = _requesting_user(ctx.mapper, request_uid)

    if target.name == ADMIN_NAME:
        raise AuthzError(f'"{ADMIN_NAME}" can\'t be deleted')
    if requester.name == target.name:
        raise AuthzError("can't delete self")

    ctx.mapper.delete("users", UidFilter(uid=target.uid))
    return _list_users(ctx.mapper)

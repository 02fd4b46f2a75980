"""REST API for the daily posts."""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from dailyposts.api.deps import current_uid, get_context, is_admin, require_admin
from dailyposts.core.context import AppContext
from dailyposts.core.errors import AuthzError, NotFoundError
from dailyposts.models.post import ContentPatch, PidFilter, Post

router = APIRouter(dependencies=[Depends(current_uid)])
logger = logging.getLogger(__name__)


class PostUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: str


@router.get("/config")
async def posts_config(ctx: AppContext = Depends(get_context)):
    return {"start": ctx.settings.setup_start, "days": ctx.settings.setup_days}


@router.get("")
async def get_posts(
    pid: int | None = None,
    admin: bool = Depends(is_admin),
    ctx: AppContext = Depends(get_context),
):
    if pid is not None:
        posts = ctx.mapper.select(Post, "posts", "pid = ?", pid)
        if len(posts) != 1:
            raise NotFoundError(f"post {pid} not found")
        return posts[0]

    # without a pid only admins get the full list
    if not admin:
        raise AuthzError("Listing all posts requires admin rights")
    return ctx.mapper.select(Post, "posts")


@router.patch("", dependencies=[Depends(require_admin)])
async def patch_post(pid: int, body: PostUpdate, ctx: AppContext = Depends(get_context)):
    updated = ctx.mapper.update("posts", ContentPatch(content=body.content), PidFilter(pid=pid))
    if updated == 0:
        raise NotFoundError(f"post {pid} not found")

    logger.debug(f"Updated post {pid}")
    return ctx.mapper.select(Post, "posts", "pid = ?", pid)[0]

"""REST API for comments on the daily posts."""

import logging
from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from dailyposts.api.deps import current_uid, get_context, is_admin, require_admin
from dailyposts.core.context import AppContext
from dailyposts.core.errors import AuthzError, ConflictError, NotFoundError
from dailyposts.models.comment import AnswerPatch, CidFilter, Comment, NewComment
from dailyposts.models.post import PostDate

router = APIRouter(dependencies=[Depends(current_uid)])
logger = logging.getLogger(__name__)


class CommentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str


class CommentAnswer(BaseModel):
    model_config = ConfigDict(extra="forbid")

    answer: str


@router.get("")
async def get_comments(
    pid: int | None = None,
    admin: bool = Depends(is_admin),
    ctx: AppContext = Depends(get_context),
):
    if pid is not None:
        return ctx.mapper.select(Comment, "comments", "pid = ?", pid)

    if not admin:
        raise AuthzError("Listing all comments requires admin rights")
    return ctx.mapper.select(Comment, "comments")


@router.post("")
async def post_comment(
    pid: int,
    body: CommentCreate,
    uid: int = Depends(current_uid),
    ctx: AppContext = Depends(get_context),
):
    posts = ctx.mapper.select(PostDate, "posts", "pid = ? LIMIT 1", pid)
    if len(posts) != 1:
        raise NotFoundError(f"post {pid} not found")

    # comments are only open on the day of the post
    if posts[0].date != date.today().isoformat():
        raise AuthzError("Comments are closed for this post")

    if ctx.mapper.select(CidFilter, "comments", "pid = ? AND uid = ?", pid, uid):
        raise ConflictError("You already commented on this post")

    ctx.mapper.insert("comments", NewComment(pid=pid, uid=uid, text=body.text))
    logger.debug(f"User {uid} commented on post {pid}")
    return ctx.mapper.select(Comment, "comments", "pid = ?", pid)


@router.delete("", dependencies=[Depends(require_admin)])
async def delete_comment(cid: int, ctx: AppContext = Depends(get_context)):
    comments = ctx.mapper.select(Comment, "comments", "cid = ?", cid)
    if len(comments) != 1:
        raise NotFoundError(f"comment {cid} not found")

    ctx.mapper.delete("comments", CidFilter(cid=cid))
    return ctx.mapper.select(Comment, "comments", "pid = ?", comments[0].pid)


@router.post("/answer", dependencies=[Depends(require_admin)])
async def answer_comment(cid: int, body: CommentAnswer, ctx: AppContext = Depends(get_context)):
    ctx.mapper.update("comments", AnswerPatch(answer=body.answer), CidFilter(cid=cid))

    comments = ctx.mapper.select(Comment, "comments", "cid = ?", cid)
    if len(comments) != 1:
        raise NotFoundError(f"comment {cid} not found")
    return comments[0]

"""File browser endpoint: /api/storage/browse?q=<operation>&adapter=<name>&path=<adapter>://<path>"""

import json
import logging
from dataclasses import asdict
from urllib.parse import quote

import pydantic
from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel

from dailyposts.api.deps import get_context, require_admin
from dailyposts.core.context import AppContext
from dailyposts.core.errors import ValidationError
from dailyposts.core.sandbox import strip_adapter
from dailyposts.services.storage import StorageBrowser

router = APIRouter(dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)


class ItemPath(BaseModel):
    path: str


class NewFolderBody(BaseModel):
    name: str


class RenameBody(BaseModel):
    item: str
    name: str


class MoveBody(BaseModel):
    item: str
    items: list[ItemPath]


class DeleteBody(BaseModel):
    items: list[ItemPath]


def _adapter(request: Request, ctx: AppContext, required: bool) -> str:
    adapter = request.query_params.get("adapter", "")
    if adapter in ("", "null", "undefined"):
        if required:
            raise ValidationError('query is missing "adapter"')
        return ctx.settings.default_adapter
    return adapter


def _required(request: Request, key: str) -> str:
    value = request.query_params.get(key, "")
    if not value:
        raise ValidationError(f'query is missing "{key}"')
    return value


async def _body(request: Request, model: type[BaseModel]):
    try:
        return model.model_validate(await request.json())
    except (json.JSONDecodeError, pydantic.ValidationError) as e:
        raise ValidationError(f"body can't be parsed as {model.__name__}: {e}") from e


def _index(request: Request, ctx: AppContext) -> dict:
    adapter = _adapter(request, ctx, required=False)
    path = request.query_params.get("path", "")
    browser = StorageBrowser(ctx.sandbox, adapter)
    dirname = ctx.sandbox.resolve(strip_adapter(path, adapter))
    return {
        "adapter": adapter,
        "storages": [adapter],
        "dirname": f"{adapter}://{dirname}",
        "files": [asdict(e) for e in browser.list_dir(path)],
    }


async def get_index(request: Request, ctx: AppContext):
    return _index(request, ctx)


async def get_subfolders(request: Request, ctx: AppContext):
    path = _required(request, "path")
    browser = StorageBrowser(ctx.sandbox, _adapter(request, ctx, required=True))
    return {"folders": [asdict(e) for e in browser.list_dir(path, dirs_only=True)]}


async def get_preview(request: Request, ctx: AppContext):
    path = _required(request, "path")
    browser = StorageBrowser(ctx.sandbox, _adapter(request, ctx, required=True))
    content, media_type = browser.read(path)
    return Response(content=content, media_type=media_type)


async def get_download(request: Request, ctx: AppContext):
    response = await get_preview(request, ctx)
    name = request.query_params["path"].rsplit("/", 1)[-1]
    quoted = quote(name)
    if quoted != name:
        response.headers["Content-Disposition"] = f"attachment; filename*=utf-8''{quoted}"
    else:
        response.headers["Content-Disposition"] = f'attachment; filename="{name}"'
    return response


async def post_new_folder(request: Request, ctx: AppContext):
    browser = StorageBrowser(ctx.sandbox, _adapter(request, ctx, required=True))
    body = await _body(request, NewFolderBody)
    browser.make_dir(request.query_params.get("path", ""), body.name)
    return _index(request, ctx)


async def post_rename(request: Request, ctx: AppContext):
    browser = StorageBrowser(ctx.sandbox, _adapter(request, ctx, required=True))
    body = await _body(request, RenameBody)
    browser.rename(body.item, body.name)
    return _index(request, ctx)


async def post_move(request: Request, ctx: AppContext):
    browser = StorageBrowser(ctx.sandbox, _adapter(request, ctx, required=True))
    body = await _body(request, MoveBody)
    browser.move(body.item, [i.path for i in body.items])
    return _index(request, ctx)


async def post_delete(request: Request, ctx: AppContext):
    browser = StorageBrowser(ctx.sandbox, _adapter(request, ctx, required=True))
    body = await _body(request, DeleteBody)
    browser.delete([i.path for i in body.items])
    return _index(request, ctx)


OPERATIONS = {
    "GET": {
        "index": get_index,
        "subfolders": get_subfolders,
        "preview": get_preview,
        "download": get_download,
    },
    "POST": {
        "newfolder": post_new_folder,
        "rename": post_rename,
        "move": post_move,
        "delete": post_delete,
    },
}


@router.api_route("/browse", methods=["GET", "POST"])
async def browse(request: Request, ctx: AppContext = Depends(get_context)):
    logger.debug(f"HTTP {request.method} request: {request.url}")

    q = request.query_params.get("q", "")
    if not q:
        raise ValidationError('query is missing "q"')

    handler = OPERATIONS[request.method].get(q)
    if handler is None:
        raise ValidationError(f'invalid value for "q": {q!r}')

    return await handler(request, ctx)

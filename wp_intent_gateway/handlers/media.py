"""
Media library handlers.

Uploads through natural language need a local file path in the
utterance ("upload file /tmp/cover.png").
"""

from typing import Any, Dict

from ..executor import register, require
from ..models import Action, Resource


async def handle_media_get(client, entities: Dict[str, str]) -> Any:
    return await client.get_media({})


async def handle_media_get_by_id(client, entities: Dict[str, str]) -> Any:
    return await client.get_media_item(require(entities, "id", "Media ID"))


async def handle_media_upload(client, entities: Dict[str, str]) -> Any:
    path = require(entities, "file", "A local file path for the upload")
    return await client.upload_media(path, entities.get("title", ""))


async def handle_media_delete(client, entities: Dict[str, str]) -> Any:
    return await client.delete_media(require(entities, "id", "Media ID"))


def register_handlers() -> None:
    register(Resource.MEDIA, Action.GET, handle_media_get)
    register(Resource.MEDIA, Action.GET_BY_ID, handle_media_get_by_id)
    register(Resource.MEDIA, Action.UPLOAD, handle_media_upload)
    register(Resource.MEDIA, Action.DELETE, handle_media_delete)

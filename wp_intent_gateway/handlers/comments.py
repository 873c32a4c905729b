"""
Comment handlers.

A new comment is attached to the post whose ID appears in the utterance.
"""

from typing import Any, Dict

from ..errors import ExecutionError
from ..executor import content_fields, register, require
from ..models import Action, Resource


async def handle_comments_get(client, entities: Dict[str, str]) -> Any:
    return await client.get_comments({})


async def handle_comments_get_by_id(client, entities: Dict[str, str]) -> Any:
    return await client.get_comment(require(entities, "id", "Comment ID"))


async def handle_comments_create(client, entities: Dict[str, str]) -> Any:
    data = content_fields(entities)
    data.pop("title", None)
    if not data.get("content"):
        raise ExecutionError("Comment content is required")
    if entities.get("id"):
        data["post"] = entities["id"]
    return await client.create_comment(data)


async def handle_comments_update(client, entities: Dict[str, str]) -> Any:
    comment_id = require(entities, "id", "Comment ID")
    return await client.update_comment(comment_id, content_fields(entities))


async def handle_comments_delete(client, entities: Dict[str, str]) -> Any:
    return await client.delete_comment(require(entities, "id", "Comment ID"))


def register_handlers() -> None:
    register(Resource.COMMENTS, Action.GET, handle_comments_get)
    register(Resource.COMMENTS, Action.GET_BY_ID, handle_comments_get_by_id)
    register(Resource.COMMENTS, Action.CREATE, handle_comments_create)
    register(Resource.COMMENTS, Action.UPDATE, handle_comments_update)
    register(Resource.COMMENTS, Action.DELETE, handle_comments_delete)

"""
Post and page handlers.

Create and update always go out with ``status: publish`` unless the
utterance carried a status.
"""

import logging
from typing import Any, Dict

from .. import policy
from ..executor import content_fields, register, require
from ..models import Action, Resource

logger = logging.getLogger("wp-gateway.handlers.content")


def _new_content(entities: Dict[str, str], kind: str) -> Dict[str, Any]:
    data = content_fields(entities)
    data.setdefault("title", f"New {kind.capitalize()}")
    data.setdefault("content", f"{kind.capitalize()} content")
    return policy.with_publish_status(data, f"{kind} creation")


def _changed_content(entities: Dict[str, str], kind: str, item_id: str) -> Dict[str, Any]:
    return policy.with_publish_status(content_fields(entities), f"{kind} {item_id} update")


async def handle_posts_get(client, entities: Dict[str, str]) -> Any:
    return await client.get_posts({})


async def handle_posts_get_by_id(client, entities: Dict[str, str]) -> Any:
    return await client.get_post(require(entities, "id", "Post ID"))


async def handle_posts_create(client, entities: Dict[str, str]) -> Any:
    return await client.create_post(_new_content(entities, "post"))


async def handle_posts_update(client, entities: Dict[str, str]) -> Any:
    post_id = require(entities, "id", "Post ID")
    return await client.update_post(post_id, _changed_content(entities, "post", post_id))


async def handle_posts_delete(client, entities: Dict[str, str]) -> Any:
    return await client.delete_post(require(entities, "id", "Post ID"))


async def handle_pages_get(client, entities: Dict[str, str]) -> Any:
    return await client.get_pages({})


async def handle_pages_get_by_id(client, entities: Dict[str, str]) -> Any:
    return await client.get_page(require(entities, "id", "Page ID"))


async def handle_pages_create(client, entities: Dict[str, str]) -> Any:
    return await client.create_page(_new_content(entities, "page"))


async def handle_pages_update(client, entities: Dict[str, str]) -> Any:
    page_id = require(entities, "id", "Page ID")
    return await client.update_page(page_id, _changed_content(entities, "page", page_id))


async def handle_pages_delete(client, entities: Dict[str, str]) -> Any:
    return await client.delete_page(require(entities, "id", "Page ID"))


def register_handlers() -> None:
    register(Resource.POSTS, Action.GET, handle_posts_get)
    register(Resource.POSTS, Action.GET_BY_ID, handle_posts_get_by_id)
    register(Resource.POSTS, Action.CREATE, handle_posts_create)
    register(Resource.POSTS, Action.UPDATE, handle_posts_update)
    register(Resource.POSTS, Action.DELETE, handle_posts_delete)
    register(Resource.PAGES, Action.GET, handle_pages_get)
    register(Resource.PAGES, Action.GET_BY_ID, handle_pages_get_by_id)
    register(Resource.PAGES, Action.CREATE, handle_pages_create)
    register(Resource.PAGES, Action.UPDATE, handle_pages_update)
    register(Resource.PAGES, Action.DELETE, handle_pages_delete)

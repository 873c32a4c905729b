"""
Category and tag handlers.

Terms need a name; a quoted title in the utterance is used as the name.
"""

from typing import Any, Dict

from ..errors import ExecutionError
from ..executor import content_fields, register, require
from ..models import Action, Resource


def _term_fields(entities: Dict[str, str]) -> Dict[str, Any]:
    data = content_fields(entities)
    title = data.pop("title", None)
    if title and "name" not in data:
        data["name"] = title
    if "content" in data:
        data["description"] = data.pop("content")
    return data


def _new_term(entities: Dict[str, str], kind: str) -> Dict[str, Any]:
    data = _term_fields(entities)
    if not data.get("name"):
        raise ExecutionError(f"A name is required to create a {kind}")
    return data


async def handle_categories_get(client, entities: Dict[str, str]) -> Any:
    return await client.get_categories({})


async def handle_categories_get_by_id(client, entities: Dict[str, str]) -> Any:
    return await client.get_category(require(entities, "id", "Category ID"))


async def handle_categories_create(client, entities: Dict[str, str]) -> Any:
    return await client.create_category(_new_term(entities, "category"))


async def handle_categories_update(client, entities: Dict[str, str]) -> Any:
    category_id = require(entities, "id", "Category ID")
    return await client.update_category(category_id, _term_fields(entities))


async def handle_categories_delete(client, entities: Dict[str, str]) -> Any:
    return await client.delete_category(require(entities, "id", "Category ID"))


async def handle_tags_get(client, entities: Dict[str, str]) -> Any:
    return await client.get_tags({})


async def handle_tags_get_by_id(client, entities: Dict[str, str]) -> Any:
    return await client.get_tag(require(entities, "id", "Tag ID"))


async def handle_tags_create(client, entities: Dict[str, str]) -> Any:
    return await client.create_tag(_new_term(entities, "tag"))


async def handle_tags_update(client, entities: Dict[str, str]) -> Any:
    tag_id = require(entities, "id", "Tag ID")
    return await client.update_tag(tag_id, _term_fields(entities))


async def handle_tags_delete(client, entities: Dict[str, str]) -> Any:
    return await client.delete_tag(require(entities, "id", "Tag ID"))


def register_handlers() -> None:
    register(Resource.CATEGORIES, Action.GET, handle_categories_get)
    register(Resource.CATEGORIES, Action.GET_BY_ID, handle_categories_get_by_id)
    register(Resource.CATEGORIES, Action.CREATE, handle_categories_create)
    register(Resource.CATEGORIES, Action.UPDATE, handle_categories_update)
    register(Resource.CATEGORIES, Action.DELETE, handle_categories_delete)
    register(Resource.TAGS, Action.GET, handle_tags_get)
    register(Resource.TAGS, Action.GET_BY_ID, handle_tags_get_by_id)
    register(Resource.TAGS, Action.CREATE, handle_tags_create)
    register(Resource.TAGS, Action.UPDATE, handle_tags_update)
    register(Resource.TAGS, Action.DELETE, handle_tags_delete)

"""
User handlers.
"""

from typing import Any, Dict

from ..executor import content_fields, register, require
from ..models import Action, Resource


async def handle_users_get(client, entities: Dict[str, str]) -> Any:
    return await client.get_users({})


async def handle_users_get_by_id(client, entities: Dict[str, str]) -> Any:
    return await client.get_user(require(entities, "id", "User ID"))


async def handle_users_create(client, entities: Dict[str, str]) -> Any:
    return await client.create_user(content_fields(entities))


async def handle_users_update(client, entities: Dict[str, str]) -> Any:
    user_id = require(entities, "id", "User ID")
    return await client.update_user(user_id, content_fields(entities))


async def handle_users_delete(client, entities: Dict[str, str]) -> Any:
    user_id = require(entities, "id", "User ID")
    return await client.delete_user(user_id, entities.get("reassign"))


def register_handlers() -> None:
    register(Resource.USERS, Action.GET, handle_users_get)
    register(Resource.USERS, Action.GET_BY_ID, handle_users_get_by_id)
    register(Resource.USERS, Action.CREATE, handle_users_create)
    register(Resource.USERS, Action.UPDATE, handle_users_update)
    register(Resource.USERS, Action.DELETE, handle_users_delete)

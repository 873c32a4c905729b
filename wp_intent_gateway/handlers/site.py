"""
Site-level handlers: menus, plugins and settings.
"""

import logging
from typing import Any, Dict

from ..errors import ExecutionError
from ..executor import content_fields, register, require
from ..models import Action, Resource

logger = logging.getLogger("wp-gateway.handlers.site")


async def handle_menus_get(client, entities: Dict[str, str]) -> Any:
    return await client.get_menus()


async def handle_menus_get_by_id(client, entities: Dict[str, str]) -> Any:
    return await client.get_menu(require(entities, "id", "Menu ID"))


async def handle_plugins_get(client, entities: Dict[str, str]) -> Any:
    return await client.get_plugins()


async def handle_plugins_get_by_name(client, entities: Dict[str, str]) -> Any:
    return await client.get_plugin(require(entities, "plugin", "Plugin name"))


async def handle_plugins_activate(client, entities: Dict[str, str]) -> Any:
    plugin = require(entities, "plugin", "Plugin name")
    logger.info(f"Activating plugin {plugin}")
    return await client.activate_plugin(plugin)


async def handle_plugins_deactivate(client, entities: Dict[str, str]) -> Any:
    plugin = require(entities, "plugin", "Plugin name")
    logger.info(f"Deactivating plugin {plugin}")
    return await client.deactivate_plugin(plugin)


async def handle_settings_get(client, entities: Dict[str, str]) -> Any:
    return await client.get_settings()


async def handle_settings_update(client, entities: Dict[str, str]) -> Any:
    data = content_fields(entities)
    if not data:
        raise ExecutionError("No setting values found to update")
    return await client.update_settings(data)


def register_handlers() -> None:
    register(Resource.MENUS, Action.GET, handle_menus_get)
    register(Resource.MENUS, Action.GET_BY_ID, handle_menus_get_by_id)
    register(Resource.PLUGINS, Action.GET, handle_plugins_get)
    register(Resource.PLUGINS, Action.GET_BY_NAME, handle_plugins_get_by_name)
    register(Resource.PLUGINS, Action.ACTIVATE, handle_plugins_activate)
    register(Resource.PLUGINS, Action.DEACTIVATE, handle_plugins_deactivate)
    register(Resource.SETTINGS, Action.GET, handle_settings_get)
    register(Resource.SETTINGS, Action.UPDATE, handle_settings_update)

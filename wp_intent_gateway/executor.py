"""
Operation executor.

REST-shaped operations go straight to the client's generic ``request``;
intent-shaped operations dispatch through a (resource, action) handler
table. Resources outside the fixed enumeration are treated as custom post
types.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from . import policy
from .errors import ExecutionError
from .models import (
    CUSTOM_TYPE_ACTIONS,
    SUPPORTED_ACTIONS,
    Action,
    CanonicalOperation,
    IntentOperation,
    Resource,
    RestOperation,
)

logger = logging.getLogger("wp-gateway.executor")

# Type for handler functions: (client, entities) -> JSON result
HandlerFunc = Callable[[Any, Dict[str, str]], Awaitable[Any]]

# Registry of (resource, action) -> handler
_handlers: Dict[Tuple[Resource, Action], HandlerFunc] = {}

# Endpoints answered locally, never forwarded to the CMS
CUSTOM_ENDPOINTS = frozenset({"seo_analysis", "analytics", "custom_report"})

# Entity keys that address a resource rather than describe its content
SLOT_KEYS = frozenset({"id", "plugin", "reassign", "file"})

# REST methods that act on one item of a collection
ITEM_METHODS = frozenset({"PUT", "DELETE"})
SINGLETON_RESOURCES = frozenset({Resource.SETTINGS.value})
_RESOURCE_NAMES = frozenset(r.value for r in Resource)


def register(resource: Resource, action: Action, handler: HandlerFunc) -> None:
    """Register a handler for a resource/action pair."""
    if action not in SUPPORTED_ACTIONS[resource]:
        raise ValueError(f"{action.value} is not a supported action for {resource.value}")
    _handlers[(resource, action)] = handler
    logger.debug(f"Registered handler for {resource.value}.{action.value}")


def get_handler(resource: Resource, action: Action) -> Optional[HandlerFunc]:
    return _handlers.get((resource, action))


def missing_handlers() -> List[str]:
    return sorted(
        f"{resource.value}.{action.value}"
        for resource, actions in SUPPORTED_ACTIONS.items()
        for action in actions
        if (resource, action) not in _handlers
    )


def verify_handler_table() -> None:
    """Fail at startup if any supported pair has no handler."""
    missing = missing_handlers()
    if missing:
        raise RuntimeError(f"No handler registered for: {', '.join(missing)}")


def require(entities: Dict[str, str], key: str, what: str) -> str:
    """Return a required entity or raise ExecutionError."""
    value = entities.get(key)
    if not value:
        raise ExecutionError(f"{what} is required")
    return value


def content_fields(entities: Dict[str, str]) -> Dict[str, Any]:
    return {k: v for k, v in entities.items() if k not in SLOT_KEYS}


def _require_item_path(operation: RestOperation) -> None:
    """PUT and DELETE on a collection must name the item (``posts/42``)."""
    base = operation.base_resource
    if operation.method not in ITEM_METHODS or base in SINGLETON_RESOURCES or base not in _RESOURCE_NAMES:
        return
    if "/" not in operation.endpoint:
        raise ExecutionError(f"An ID is required to {operation.method} {base}")


def describe(operation: CanonicalOperation) -> str:
    """One-line human-readable interpretation of an operation."""
    if isinstance(operation, RestOperation):
        return f'{operation.method} request to endpoint "{operation.endpoint}"'
    return f"{operation.action.value.upper()} operation on {operation.resource}"


class OperationExecutor:
    """Executes canonical operations against a CMS client."""

    def __init__(self) -> None:
        from .handlers import register_all_handlers

        register_all_handlers()
        verify_handler_table()

    async def execute(self, operation: CanonicalOperation, client: Any) -> Any:
        if isinstance(operation, RestOperation):
            return await self._execute_rest(operation, client)
        if isinstance(operation, IntentOperation):
            return await self._execute_intent(operation, client)
        raise ExecutionError(f"Invalid operation format: {type(operation).__name__}")

    async def _execute_rest(self, operation: RestOperation, client: Any) -> Any:
        if operation.endpoint in CUSTOM_ENDPOINTS:
            return self._custom_endpoint(operation)

        _require_item_path(operation)
        operation = policy.enforce(operation)
        logger.info(f"Dispatching {operation.method} {operation.endpoint}")
        return await client.request(operation.method.lower(), operation.endpoint, operation.data, operation.params)

    @staticmethod
    def _custom_endpoint(operation: RestOperation) -> Dict[str, Any]:
        logger.info(f"Handling custom endpoint locally: {operation.endpoint}")
        if operation.endpoint == "seo_analysis":
            message = f"SEO analysis performed for {operation.data.get('url')}"
        else:
            message = f"Operation {operation.endpoint} processed successfully"
        return {"success": True, "message": message, "data": operation.data}

    async def _execute_intent(self, operation: IntentOperation, client: Any) -> Any:
        try:
            resource = Resource(operation.resource)
        except ValueError:
            return await self._execute_custom_type(operation, client)

        if operation.action not in SUPPORTED_ACTIONS[resource]:
            raise ExecutionError(f"Unsupported action for {resource.value}: {operation.action.value}")

        handler = get_handler(resource, operation.action)
        if handler is None:
            raise ExecutionError(f"No handler registered for {resource.value}.{operation.action.value}")

        logger.info(f"Dispatching {resource.value}.{operation.action.value}")
        return await handler(client, operation.entities)

    async def _execute_custom_type(self, operation: IntentOperation, client: Any) -> Any:
        post_type = operation.resource
        action = operation.action
        entities = operation.entities
        if action not in CUSTOM_TYPE_ACTIONS:
            raise ExecutionError(f"Unsupported action for custom type {post_type}: {action.value}")

        logger.info(f"Dispatching custom post type {post_type}.{action.value}")
        if action == Action.GET:
            return await client.get_custom_posts(post_type)
        if action == Action.CREATE:
            return await client.create_custom_post(post_type, content_fields(entities))

        post_id = require(entities, "id", f"ID for {action.value} on {post_type}")
        if action == Action.GET_BY_ID:
            return await client.get_custom_post(post_type, post_id)
        if action == Action.UPDATE:
            return await client.update_custom_post(post_type, post_id, content_fields(entities))
        return await client.delete_custom_post(post_type, post_id)

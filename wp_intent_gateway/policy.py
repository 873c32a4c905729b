"""
Publish-status policy: posts and pages created or updated through the
gateway are published immediately unless a status was given.
"""

import logging
from typing import Any, Dict, Optional

from .models import PUBLISHED_RESOURCES, RestOperation

logger = logging.getLogger("wp-gateway.policy")

PUBLISH_STATUS = "publish"


def requires_publish(method: str, endpoint: str) -> bool:
    if method.upper() not in ("POST", "PUT"):
        return False
    base = endpoint.strip("/").split("/", 1)[0]
    return base in PUBLISHED_RESOURCES


def with_publish_status(data: Optional[Dict[str, Any]], target: str) -> Dict[str, Any]:
    """Copy of data with ``status`` defaulted to publish."""
    processed = dict(data or {})
    if not processed.get("status"):
        processed["status"] = PUBLISH_STATUS
        logger.info(f"Status defaulted to 'publish' for {target}")
    return processed


def enforce(operation: RestOperation) -> RestOperation:
    """Apply the policy to a REST-shaped operation."""
    if not requires_publish(operation.method, operation.endpoint):
        return operation
    return operation.model_copy(
        update={"data": with_publish_status(operation.data, f"{operation.method} {operation.endpoint}")}
    )

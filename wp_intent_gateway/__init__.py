"""
Natural-language gateway for the WordPress REST API.

Resolves free text into a canonical operation (generative extraction,
local classifier, or simple regex commands) and executes it against a
WordPress site.

Usage:
    from wp_intent_gateway import WordPressGateway

    gateway = WordPressGateway()
    result = await gateway.process("list all posts")
    print(result.output)
"""

from .models import (
    Action,
    GatewayResult,
    IntentOperation,
    Resource,
    RestOperation,
    SiteCredentials,
)
from .errors import (
    ConfigurationError,
    ExecutionError,
    GatewayError,
    RequestError,
    ResolutionError,
    UpstreamError,
)
from .config import GatewayConfig, load_config
from .gateway import WordPressGateway


__all__ = [
    "WordPressGateway",
    "GatewayConfig",
    "load_config",
    "Action",
    "Resource",
    "RestOperation",
    "IntentOperation",
    "SiteCredentials",
    "GatewayResult",
    "GatewayError",
    "RequestError",
    "ConfigurationError",
    "ResolutionError",
    "ExecutionError",
    "UpstreamError",
]

"""
Request boundary for the gateway.

Accepts either the chat payload ``{"messages": [...]}`` (the last message
is the query) or the plain ``{"query": "..."}`` payload, picks per-request
or default credentials, and formats the assistant reply.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from .classifier import IntentClassifier
from .config import GatewayConfig, load_config
from .errors import RequestError
from .executor import OperationExecutor
from .llm_client import LLMExtractor, ProviderRegistry, build_registry
from .models import GatewayResult, RestOperation, SiteCredentials
from .orchestrator import ClientFactory, Orchestrator

logger = logging.getLogger("wp-gateway.gateway")


def parse_query(payload: Any) -> str:
    """Pull the query text out of a request payload."""
    if not isinstance(payload, dict):
        raise RequestError("Request body must be a JSON object")

    messages = payload.get("messages")
    if isinstance(messages, list) and messages:
        last = messages[-1]
        content = last.get("content") if isinstance(last, dict) else None
        if isinstance(content, str) and content.strip():
            return content
        raise RequestError("Last message has no text content")

    query = payload.get("query")
    if isinstance(query, str) and query.strip():
        return query

    raise RequestError("Invalid request format: expected 'messages' or 'query'")


def credentials_from(payload: Dict[str, Any], defaults: SiteCredentials) -> Tuple[SiteCredentials, bool]:
    """
    Per-request credentials when the payload names a site, else the defaults.

    Returns the credentials and whether they came from the request.
    """
    site_url = payload.get("site_url")
    if not site_url:
        return defaults, False

    app_password = payload.get("app_password") or None
    return (
        SiteCredentials(
            url=site_url,
            username=payload.get("username") or None,
            app_password=app_password,
            password=None if app_password else payload.get("password") or None,
        ),
        True,
    )


def to_response(result: GatewayResult) -> Dict[str, Any]:
    """Chat-style response body."""
    body: Dict[str, Any] = {
        "success": result.success,
        "response": {"role": "assistant", "content": result.output},
    }
    if not result.success:
        body["error"] = result.error
        body["code"] = result.code
        if result.suggestions:
            body["suggestions"] = result.suggestions
    return body


class WordPressGateway:
    """Process-wide gateway: config, classifier and providers built once."""

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        registry: Optional[ProviderRegistry] = None,
        classifier: Optional[IntentClassifier] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.config = config or load_config()
        self.registry = registry or build_registry(self.config.ai)

        self.classifier = classifier or IntentClassifier()
        self.classifier.train()

        self.orchestrator = Orchestrator(
            self.config,
            LLMExtractor(self.registry, temperature=self.config.ai.temperature),
            self.classifier,
            OperationExecutor(),
            client_factory=client_factory,
        )
        logger.info(f"Gateway ready (providers: {self.registry.names or 'none'})")

    async def process(self, text: str, credentials: Optional[SiteCredentials] = None) -> GatewayResult:
        """Resolve and execute text against the given site or the default one."""
        if credentials is None:
            return await self.orchestrator.process(text, self.config.site)
        return await self.orchestrator.process(text, credentials, from_request=True)

    async def handle(self, payload: Any) -> Tuple[Dict[str, Any], int]:
        """Handle a raw request payload; returns the response body and status."""
        try:
            text = parse_query(payload)
        except RequestError as e:
            logger.warning(f"Rejected request: {e.message}")
            return {"success": False, "error": e.message, "code": e.code}, e.status_code

        credentials, from_request = credentials_from(payload, self.config.site)
        result = await self.orchestrator.process(text, credentials, from_request=from_request)
        return to_response(result), result.status_code

    def transform_simple_command(self, text: str) -> Optional[RestOperation]:
        return self.orchestrator.transform_simple_command(text)

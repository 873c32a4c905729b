"""
Intent resolution orchestrator.

Per request, first match wins:

1. short-circuit literal commands ("test", "echo")
2. credential gate
3. authentication against the site
4. resolution strategies in the configured order (``llm``, ``classifier``,
   ``regex``); an ``llm`` strategy without a configured provider is skipped,
   a strategy that fails ends resolution unless ``fallback_on_failure``
5. publish-status policy, then execution

Every failure becomes a ``GatewayResult`` with a code and status.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from . import normalizer, policy, regex_extractor
from .classifier import IntentClassifier
from .config import GatewayConfig
from .errors import (
    ConfigurationError,
    ExecutionError,
    GatewayError,
    ResolutionError,
    UpstreamError,
)
from .executor import OperationExecutor, describe
from .llm_client import LLMExtractor
from .models import (
    CanonicalOperation,
    GatewayResult,
    IntentLabel,
    IntentOperation,
    RestOperation,
    SiteCredentials,
)
from .wp_client import WordPressClient

logger = logging.getLogger("wp-gateway.orchestrator")

ClientFactory = Callable[[SiteCredentials], Any]

_REPHRASE_SUGGESTIONS = [
    "Try: 'list posts', 'show post 12', 'delete page 7'",
    "Try: 'create a post called \"Hello\" with content \"My first post\"'",
    "Send 'test' to check connectivity",
]


@dataclass
class Resolution:
    """A canonical operation and the strategy that produced it."""

    operation: CanonicalOperation
    strategy: str


class Orchestrator:
    """Turns text plus credentials into an executed operation."""

    def __init__(
        self,
        config: GatewayConfig,
        extractor: LLMExtractor,
        classifier: IntentClassifier,
        executor: OperationExecutor,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.config = config
        self.extractor = extractor
        self.classifier = classifier
        self.executor = executor
        self.client_factory = client_factory or (lambda creds: WordPressClient(creds, timeout=config.wp_timeout))
        self._strategies = {
            "llm": self._resolve_with_llm,
            "classifier": self._resolve_with_classifier,
            "regex": self._resolve_with_regex,
        }

    @staticmethod
    def check_credentials(credentials: Optional[SiteCredentials], from_request: bool = False) -> SiteCredentials:
        """Reject absent or incomplete credentials before anything else runs."""
        missing = ["url", "username", "password or app_password"] if credentials is None else credentials.missing_fields()
        if missing:
            logger.error(f"Site configuration missing or incomplete: {', '.join(missing)}")
            raise ConfigurationError(
                f"Missing site configuration: {', '.join(missing)}",
                status_code=400 if from_request else 500,
            )
        return credentials

    async def process(
        self,
        text: str,
        credentials: Optional[SiteCredentials],
        from_request: bool = False,
    ) -> GatewayResult:
        """Run the full pipeline for one request."""
        reply = normalizer.short_circuit(text)
        if reply is not None:
            logger.info("Test command detected, replying without contacting the site")
            return GatewayResult(success=True, output=reply, query=text, strategy="short_circuit")

        try:
            credentials = self.check_credentials(credentials, from_request)
            logger.info(f"Processing '{text[:80]}' for {credentials.log_safe()}")

            async with self.client_factory(credentials) as client:
                if not await client.authenticate():
                    raise UpstreamError(
                        "Authentication failed",
                        operation="authenticate",
                        code="auth_failed",
                        status_code=401,
                    )
                resolution = await self.resolve(text)
                result = await self.executor.execute(resolution.operation, client)
        except GatewayError as e:
            return self._failure(text, e)
        except Exception as e:
            logger.error(f"Unexpected error while processing '{text[:80]}': {e}", exc_info=True)
            return GatewayResult(
                success=False,
                output=f"An internal error occurred: {e}",
                query=text,
                error=str(e),
                code="internal_error",
                status_code=500,
            )

        interpretation = describe(resolution.operation)
        rendered = json.dumps(result, ensure_ascii=False, default=str)
        return GatewayResult(
            success=True,
            output=f'I executed your request "{text}" successfully ({interpretation}). Result: {rendered}',
            query=text,
            interpretation=interpretation,
            strategy=resolution.strategy,
            result=result,
        )

    async def resolve(self, text: str) -> Resolution:
        """Try the configured strategies in order; raise ResolutionError if none resolves."""
        settings = self.config.resolution
        failures: List[str] = []

        for name in settings.strategy_order:
            if name == "llm" and not self.extractor.is_available(self.config.ai.provider):
                logger.debug("No generative provider configured, skipping llm strategy")
                continue

            logger.info(f"Resolving with {name} strategy")
            try:
                operation = await self._strategies[name](text)
            except ResolutionError as e:
                if not settings.fallback_on_failure:
                    raise
                logger.warning(f"{name} strategy failed, trying next: {e.message}")
                failures.append(f"{name}: {e.message}")
                continue

            if isinstance(operation, RestOperation):
                operation = policy.enforce(operation)
            return Resolution(operation=operation, strategy=name)

        detail = "; ".join(failures) if failures else "no resolution strategy is available"
        raise ResolutionError(f"Unable to understand the request ({detail})", query=text)

    def transform_simple_command(self, text: str) -> Optional[RestOperation]:
        """Regex-only interpretation; no classifier or model involved."""
        operation = regex_extractor.extract(text)
        if operation is None:
            return None
        return policy.enforce(operation)

    async def _resolve_with_llm(self, text: str) -> CanonicalOperation:
        provider = self.config.ai.provider
        result = await self.extractor.extract(text, provider)
        if not result.success:
            raise ResolutionError(result.error or f"{provider} processing failed", query=text, strategy="llm")
        return RestOperation(method=result.method, endpoint=result.endpoint, params=result.params, data=result.data)

    async def _resolve_with_classifier(self, text: str) -> CanonicalOperation:
        output = self.classifier.classify(text)
        threshold = self.config.resolution.confidence_threshold
        if output.score < threshold:
            raise ResolutionError(
                f"Low confidence ({output.score:.2f} < {threshold:.2f}) for intent {output.label}",
                query=text,
                strategy="classifier",
            )
        try:
            label = IntentLabel.parse(output.label)
        except ValueError as e:
            raise ResolutionError(str(e), query=text, strategy="classifier") from e
        return IntentOperation(resource=label.resource, action=label.action, entities=output.entities)

    async def _resolve_with_regex(self, text: str) -> CanonicalOperation:
        operation = regex_extractor.extract(text)
        if operation is None:
            raise ResolutionError("No simple command pattern matched", query=text, strategy="regex")
        return operation

    def _failure(self, text: str, error: GatewayError) -> GatewayResult:
        logger.error(f"{error.code} for '{text[:80]}': {error.message}")

        if isinstance(error, ResolutionError):
            output = f'I couldn\'t understand your request "{text}". Error: {error.message}'
            suggestions = list(_REPHRASE_SUGGESTIONS)
        elif isinstance(error, ConfigurationError):
            output = "I can't process your request because the WordPress configuration is missing or incomplete."
            suggestions = ["Provide site_url, username and app_password (or password), or set WP_URL, WP_USERNAME and WP_APP_PASSWORD"]
        elif isinstance(error, UpstreamError) and error.code == "auth_failed":
            output = "I couldn't authenticate with WordPress. Please check the credentials."
            suggestions = ["Application passwords need HTTP Basic auth enabled; plain passwords need the JWT auth plugin"]
        elif isinstance(error, ExecutionError):
            output = f"I couldn't execute your request: {error.message}"
            suggestions = ["Include the item ID, e.g. 'delete post 42'"]
        else:
            output = f"I couldn't process your request due to an error: {error.message}"
            suggestions = []

        return GatewayResult(
            success=False,
            output=output,
            query=text,
            error=error.message,
            code=error.code,
            status_code=error.status_code,
            suggestions=suggestions,
        )

"""
Generative-model structured extraction.

Turns free text into ``{method, endpoint, params, data}`` through one of
two interchangeable backends:

- ``openai``: chat-completion API in JSON mode, the message content is the
  JSON object itself.
- ``anthropic``: messages API, free text that may wrap the JSON object in
  prose; the first balanced ``{...}`` object is located and parsed.

Providers are registered once at startup in a ``ProviderRegistry`` and
shared by all requests. ``LLMExtractor.extract`` never raises: failures
come back as ``ExtractionResult(success=False, error=...)``.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

import httpx
from openai import AsyncOpenAI
from pydantic import ValidationError

from .config import AIConfig
from .models import ExtractionResult, RestOperation

logger = logging.getLogger("wp-gateway.llm")

SYSTEM_PROMPT = """You are a WordPress API assistant. Your task is to convert natural language requests into API operations.

Output a single JSON object with the following structure and nothing else:
{
  "method": "GET|POST|PUT|DELETE",
  "endpoint": "string",
  "params": {},
  "data": {}
}
- "method" is the HTTP method to use.
- "endpoint" is the WordPress REST path segment, optionally followed by a numeric ID (e.g. "posts", "pages/123").
- "params" holds URL parameters for GET requests.
- "data" holds the request body for POST and PUT requests.

Important: When creating or updating posts and pages, ALWAYS set "status" to "publish" in the data object unless the user explicitly asks otherwise. Content is published immediately, never saved as a draft.

Examples:
1. Input: "Show me all the posts"
   Output: {"method": "GET", "endpoint": "posts", "params": {}}

2. Input: "Create a new post called 'Hello World' with content 'This is my first post'"
   Output: {"method": "POST", "endpoint": "posts", "data": {"title": "Hello World", "content": "This is my first post", "status": "publish"}}

3. Input: "Update post 123 to set the title to 'New Title'"
   Output: {"method": "PUT", "endpoint": "posts/123", "data": {"title": "New Title", "status": "publish"}}

4. Input: "Delete the post with ID 456"
   Output: {"method": "DELETE", "endpoint": "posts/456"}

Supported resources: posts, pages, media, users, categories, tags, comments, menus, plugins, settings

Only respond with valid JSON. Do not include any explanations or additional text."""

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"

_OBJECT_START_RE = re.compile(r"\{")
_GREEDY_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


class ExtractionFailed(Exception):
    """The model reply held no usable JSON object."""


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Return the first balanced top-level JSON object found in text.

    Each ``{`` is tried as a starting point in order; the greedy
    first-brace-to-last-brace span is the last resort.
    """
    if not text or not text.strip():
        raise ExtractionFailed("Empty model reply")

    decoder = json.JSONDecoder()
    for m in _OBJECT_START_RE.finditer(text):
        try:
            obj, _ = decoder.raw_decode(text, m.start())
        except json.JSONDecodeError:
            continue
        if isinstance(obj, dict):
            return obj

    m = _GREEDY_OBJECT_RE.search(text)
    if m:
        try:
            obj = json.loads(m.group(0))
        except json.JSONDecodeError as e:
            raise ExtractionFailed(f"Unable to parse JSON from model reply: {e}") from e
        if isinstance(obj, dict):
            return obj

    raise ExtractionFailed("No JSON object found in model reply")


class LLMProvider(ABC):
    """A generative backend: system prompt + user text in, JSON or text out."""

    name: str = ""

    def __init__(self, api_key: str, model: str, timeout: float = 30.0) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    @abstractmethod
    async def complete(self, system: str, text: str, temperature: float) -> Union[Dict[str, Any], str]:
        """Return a parsed JSON object, or raw text that still needs extraction."""


class OpenAIProvider(LLMProvider):
    """Chat-completion backend in JSON mode."""

    name = "openai"

    def __init__(self, api_key: str, model: str, timeout: float = 30.0, client: Optional[AsyncOpenAI] = None) -> None:
        super().__init__(api_key, model, timeout)
        self._client = client or AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    async def complete(self, system: str, text: str, temperature: float) -> Union[Dict[str, Any], str]:
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": text},
            ],
            temperature=temperature,
            response_format={"type": "json_object"},
        )
        content = response.choices[0].message.content or ""
        return json.loads(content)


class AnthropicProvider(LLMProvider):
    """Messages-API backend; replies are free text."""

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout: float = 30.0,
        max_tokens: int = 1000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(api_key, model, timeout)
        self.max_tokens = max_tokens
        self._transport = transport

    async def complete(self, system: str, text: str, temperature: float) -> Union[Dict[str, Any], str]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.post(
                ANTHROPIC_API_URL,
                headers={
                    "x-api-key": self.api_key,
                    "anthropic-version": ANTHROPIC_VERSION,
                    "content-type": "application/json",
                },
                json={
                    "model": self.model,
                    "system": system,
                    "messages": [{"role": "user", "content": text}],
                    "temperature": temperature,
                    "max_tokens": self.max_tokens,
                },
            )
            resp.raise_for_status()
            body = resp.json()
        blocks = body.get("content") or []
        return "".join(block.get("text", "") for block in blocks if block.get("type", "text") == "text")


class ProviderRegistry:
    """Generative providers keyed by name, built once at startup."""

    def __init__(self, default: Optional[str] = None) -> None:
        self._providers: Dict[str, LLMProvider] = {}
        self.default = default

    def register(self, provider: LLMProvider) -> None:
        self._providers[provider.name] = provider
        logger.debug(f"Registered LLM provider {provider.name} ({provider.model})")

    def get(self, name: Optional[str] = None) -> Optional[LLMProvider]:
        return self._providers.get(name or self.default or "")

    def is_available(self, name: Optional[str] = None) -> bool:
        return self.get(name) is not None

    @property
    def names(self) -> List[str]:
        return sorted(self._providers)


def build_registry(ai: AIConfig) -> ProviderRegistry:
    """Register every provider that has an API key; the configured one is the default."""
    registry = ProviderRegistry(default=ai.provider)
    for provider_cls in (OpenAIProvider, AnthropicProvider):
        api_key = ai.api_key_for(provider_cls.name)
        if api_key:
            registry.register(provider_cls(api_key, ai.model_for(provider_cls.name), timeout=ai.timeout))

    if registry.is_available():
        logger.info(f"Generative extraction enabled with provider '{ai.provider}'")
    elif ai.provider != "none":
        key_var = "OPENAI_API_KEY" if ai.provider == "openai" else "ANTHROPIC_API_KEY"
        logger.warning(f"No API key for provider '{ai.provider}'; set {key_var} to enable generative extraction")
    return registry


class LLMExtractor:
    """Runs the fixed extraction prompt against a registered provider."""

    def __init__(self, registry: ProviderRegistry, temperature: float = 0.1, system_prompt: str = SYSTEM_PROMPT) -> None:
        self.registry = registry
        self.temperature = temperature
        self.system_prompt = system_prompt

    def is_available(self, provider: Optional[str] = None) -> bool:
        return self.registry.is_available(provider)

    async def extract(self, text: str, provider: Optional[str] = None) -> ExtractionResult:
        backend = self.registry.get(provider)
        if backend is None:
            name = provider or self.registry.default
            return ExtractionResult(success=False, error=f"No generative provider configured for '{name}'")

        try:
            raw = await backend.complete(self.system_prompt, text, self.temperature)
            parsed = raw if isinstance(raw, dict) else extract_json_object(raw)
            operation = RestOperation.model_validate(
                {
                    "method": parsed.get("method"),
                    "endpoint": parsed.get("endpoint"),
                    "params": parsed.get("params"),
                    "data": parsed.get("data"),
                }
            )
        except ValidationError as e:
            logger.error(f"{backend.name} reply failed validation: {e}")
            return ExtractionResult(
                success=False, provider=backend.name, error=f"AI processing failed: invalid operation ({e.error_count()} error(s))"
            )
        except Exception as e:
            logger.error(f"{backend.name} processing error: {e}", exc_info=True)
            return ExtractionResult(success=False, provider=backend.name, error=f"AI processing failed: {e}")

        return ExtractionResult(
            success=True,
            provider=backend.name,
            method=operation.method,
            endpoint=operation.endpoint,
            params=operation.params,
            data=operation.data,
        )

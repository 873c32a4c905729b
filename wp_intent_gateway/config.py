"""
Process-wide configuration loaded from environment variables.

Loaded once at startup; requests only read it.
"""

import logging
import os
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import DEFAULT_SITE_URL, SiteCredentials

logger = logging.getLogger("wp-gateway.config")

STRATEGIES = ("llm", "classifier", "regex")


class AIConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str = "anthropic"
    openai_api_key: Optional[str] = Field(default=None, repr=False)
    openai_model: str = "gpt-4-turbo"
    anthropic_api_key: Optional[str] = Field(default=None, repr=False)
    anthropic_model: str = "claude-3-5-sonnet-20240620"
    temperature: float = 0.1
    timeout: float = 30.0

    def api_key_for(self, provider: str) -> Optional[str]:
        return {"openai": self.openai_api_key, "anthropic": self.anthropic_api_key}.get(provider)

    def model_for(self, provider: str) -> Optional[str]:
        return {"openai": self.openai_model, "anthropic": self.anthropic_model}.get(provider)


class ResolutionConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    strategy_order: Tuple[str, ...] = ("llm", "classifier")
    fallback_on_failure: bool = False
    confidence_threshold: float = Field(default=0.7, ge=0.0, le=1.0)

    @field_validator("strategy_order")
    @classmethod
    def _known_strategies(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        unknown = [s for s in value if s not in STRATEGIES]
        if unknown:
            raise ValueError(f"Unknown resolution strategies: {unknown}")
        if not value:
            raise ValueError("At least one resolution strategy is required")
        return value


class GatewayConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    site: SiteCredentials = Field(default_factory=lambda: SiteCredentials(url=DEFAULT_SITE_URL))
    wp_timeout: float = 10.0
    ai: AIConfig = Field(default_factory=AIConfig)
    resolution: ResolutionConfig = Field(default_factory=ResolutionConfig)


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_list(name: str, default: str) -> Tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


def load_config() -> GatewayConfig:
    """Build the gateway configuration from the environment."""
    config = GatewayConfig(
        site=SiteCredentials(
            url=os.getenv("WP_URL", DEFAULT_SITE_URL),
            username=os.getenv("WP_USERNAME") or None,
            password=os.getenv("WP_PASSWORD") or None,
            app_password=os.getenv("WP_APP_PASSWORD") or None,
        ),
        wp_timeout=float(os.getenv("WP_TIMEOUT", "10")),
        ai=AIConfig(
            provider=os.getenv("AI_PROVIDER", "anthropic").lower(),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4-turbo"),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            anthropic_model=os.getenv("ANTHROPIC_MODEL", "claude-3-5-sonnet-20240620"),
            temperature=float(os.getenv("AI_TEMPERATURE", "0.1")),
            timeout=float(os.getenv("AI_TIMEOUT", "30")),
        ),
        resolution=ResolutionConfig(
            strategy_order=_env_list("GATEWAY_STRATEGY_ORDER", "llm,classifier"),
            fallback_on_failure=_env_bool("GATEWAY_FALLBACK_ON_FAILURE"),
            confidence_threshold=float(os.getenv("GATEWAY_CONFIDENCE_THRESHOLD", "0.7")),
        ),
    )

    logger.info(f"AI provider: {config.ai.provider} (model: {config.ai.model_for(config.ai.provider) or 'n/a'})")
    logger.info(f"Strategy order: {','.join(config.resolution.strategy_order)}")
    logger.debug(f"Default site: {config.site.log_safe()}")
    return config

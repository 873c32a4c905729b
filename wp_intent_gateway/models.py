"""
Pydantic models for the WordPress intent gateway.

Defines the resource/action enumeration, site credentials, the two
canonical operation shapes and the result types returned at the boundary.
"""

from enum import Enum
from typing import Any, Dict, FrozenSet, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, field_validator

LABEL_NAMESPACE = "wpapi"


class Resource(str, Enum):
    """CMS resources with a dedicated handler table."""

    POSTS = "posts"
    PAGES = "pages"
    MEDIA = "media"
    USERS = "users"
    CATEGORIES = "categories"
    TAGS = "tags"
    COMMENTS = "comments"
    MENUS = "menus"
    PLUGINS = "plugins"
    SETTINGS = "settings"


class Action(str, Enum):
    GET = "get"
    GET_BY_ID = "getById"
    GET_BY_NAME = "getByName"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    UPLOAD = "upload"
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"


_CRUD = frozenset({Action.GET, Action.GET_BY_ID, Action.CREATE, Action.UPDATE, Action.DELETE})

# Closed resource x action table. The executor refuses to start unless every
# pair listed here has a registered handler.
SUPPORTED_ACTIONS: Mapping[Resource, FrozenSet[Action]] = {
    Resource.POSTS: _CRUD,
    Resource.PAGES: _CRUD,
    Resource.MEDIA: frozenset({Action.GET, Action.GET_BY_ID, Action.UPLOAD, Action.DELETE}),
    Resource.USERS: _CRUD,
    Resource.CATEGORIES: _CRUD,
    Resource.TAGS: _CRUD,
    Resource.COMMENTS: _CRUD,
    Resource.MENUS: frozenset({Action.GET, Action.GET_BY_ID}),
    Resource.PLUGINS: frozenset({Action.GET, Action.GET_BY_NAME, Action.ACTIVATE, Action.DEACTIVATE}),
    Resource.SETTINGS: frozenset({Action.GET, Action.UPDATE}),
}

# Actions available on custom post types (any resource outside Resource)
CUSTOM_TYPE_ACTIONS = _CRUD

# Resources whose create/update payloads are published immediately
PUBLISHED_RESOURCES = frozenset({Resource.POSTS.value, Resource.PAGES.value})

DEFAULT_SITE_URL = "https://example.com"


class SiteCredentials(BaseModel):
    """Per-request credentials for the remote site. Never persisted."""

    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)
    app_password: Optional[str] = Field(default=None, repr=False)

    @property
    def auth_mode(self) -> Optional[str]:
        """Which secret authenticates: the application password wins."""
        if self.app_password:
            return "app_password"
        if self.password:
            return "password"
        return None

    def missing_fields(self) -> List[str]:
        missing = []
        if not self.url or self.url.rstrip("/") == DEFAULT_SITE_URL:
            missing.append("url")
        if not self.username:
            missing.append("username")
        if self.auth_mode is None:
            missing.append("password or app_password")
        return missing

    def log_safe(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "username": self.username,
            "has_app_password": bool(self.app_password),
            "has_password": bool(self.password),
        }


HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]


class RestOperation(BaseModel):
    """REST-shaped canonical operation (LLM, direct input or regex fallback)."""

    kind: Literal["rest"] = "rest"
    method: HttpMethod
    endpoint: str
    params: Dict[str, Any] = Field(default_factory=dict)
    data: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("endpoint")
    @classmethod
    def _clean_endpoint(cls, value: str) -> str:
        value = value.strip().strip("/")
        if not value:
            raise ValueError("endpoint must not be empty")
        return value

    @field_validator("params", "data", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def base_resource(self) -> str:
        return self.endpoint.split("/", 1)[0]


class IntentOperation(BaseModel):
    """Intent-shaped canonical operation produced by the local classifier."""

    kind: Literal["intent"] = "intent"
    resource: str
    action: Action
    entities: Dict[str, str] = Field(default_factory=dict)


CanonicalOperation = Union[RestOperation, IntentOperation]


class IntentLabel(BaseModel):
    """A classifier label split into its (resource, action) pair."""

    resource: str
    action: Action

    @classmethod
    def parse(cls, label: str) -> "IntentLabel":
        """Split ``wpapi.<resource>.<action>``; anything else is rejected."""
        parts = (label or "").split(".")
        if len(parts) != 3 or parts[0] != LABEL_NAMESPACE or not parts[1]:
            raise ValueError(f"Malformed intent label: {label!r}")
        return cls(resource=parts[1], action=Action(parts[2]))


class ClassifierOutput(BaseModel):
    label: str
    score: float = Field(ge=0.0, le=1.0)
    entities: Dict[str, str] = Field(default_factory=dict)


class ExtractionResult(BaseModel):
    """Outcome of a generative-model extraction. Callers must check ``success``."""

    success: bool
    method: Optional[str] = None
    endpoint: Optional[str] = None
    params: Dict[str, Any] = Field(default_factory=dict)
    data: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None
    provider: Optional[str] = None


class GatewayResult(BaseModel):
    """Result returned at the request boundary."""

    success: bool
    output: str
    query: Optional[str] = None
    interpretation: Optional[str] = None
    strategy: Optional[str] = None
    result: Any = None
    error: Optional[str] = None
    code: Optional[str] = None
    status_code: int = 200
    suggestions: List[str] = Field(default_factory=list)

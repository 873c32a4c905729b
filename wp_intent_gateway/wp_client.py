"""
Async client for the WordPress REST API (wp/v2).

Typed helpers per resource plus a generic ``request``. Every failed call
raises ``UpstreamError`` naming the operation attempted. No retries.
"""

import logging
import mimetypes
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from .errors import ExecutionError, UpstreamError
from .models import SiteCredentials

logger = logging.getLogger("wp-gateway.wp-client")

_METHODS = ("get", "post", "put", "delete")


class WordPressClient:
    """Authenticated HTTP client for one site."""

    def __init__(
        self,
        credentials: SiteCredentials,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.credentials = credentials
        self.site_url = (credentials.url or "").rstrip("/")
        self.base_url = f"{self.site_url}/wp-json/wp/v2"
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)
        if credentials.app_password:
            self._client.auth = httpx.BasicAuth(credentials.username or "", credentials.app_password)

    async def __aenter__(self) -> "WordPressClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def authenticate(self) -> bool:
        """
        Application passwords authenticate with HTTP Basic directly; plain
        passwords are exchanged for a JWT bearer token.
        """
        if self.credentials.app_password:
            return True
        if not (self.credentials.username and self.credentials.password):
            return False

        try:
            resp = await self._client.post(
                f"{self.site_url}/wp-json/jwt-auth/v1/token",
                json={"username": self.credentials.username, "password": self.credentials.password},
            )
            resp.raise_for_status()
            token = resp.json().get("token")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Authentication failed for {self.site_url}: {e}")
            return False

        if not token:
            logger.error(f"Authentication failed for {self.site_url}: no token in response")
            return False
        self._client.headers["Authorization"] = f"Bearer {token}"
        return True

    async def _call(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        **kwargs,
    ) -> Any:
        try:
            resp = await self._client.request(method, path, json=json, params=params or None, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"Failed to {operation}: HTTP {e.response.status_code}",
                operation=operation,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Failed to {operation}: {e}", operation=operation) from e

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(f"Failed to {operation}: response is not JSON", operation=operation) from e

    # Generic

    async def request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        method = method.lower()
        if method not in _METHODS:
            raise ExecutionError(f"Invalid method: {method}")
        body = data if method in ("post", "put") else None
        path = "/" + endpoint.lstrip("/")
        return await self._call(method.upper(), path, f"{method.upper()} {endpoint}", json=body, params=params)

    # Posts

    async def get_posts(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._call("GET", "/posts", "get posts", params=params)

    async def get_post(self, post_id: str) -> Any:
        return await self._call("GET", f"/posts/{post_id}", f"get post {post_id}")

    async def create_post(self, data: Dict[str, Any]) -> Any:
        return await self._call("POST", "/posts", "create post", json=data)

    async def update_post(self, post_id: str, data: Dict[str, Any]) -> Any:
        return await self._call("PUT", f"/posts/{post_id}", f"update post {post_id}", json=data)

    async def delete_post(self, post_id: str) -> Any:
        return await self._call("DELETE", f"/posts/{post_id}", f"delete post {post_id}")

    # Pages

    async def get_pages(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._call("GET", "/pages", "get pages", params=params)

    async def get_page(self, page_id: str) -> Any:
        return await self._call("GET", f"/pages/{page_id}", f"get page {page_id}")

    async def create_page(self, data: Dict[str, Any]) -> Any:
        return await self._call("POST", "/pages", "create page", json=data)

    async def update_page(self, page_id: str, data: Dict[str, Any]) -> Any:
        return await self._call("PUT", f"/pages/{page_id}", f"update page {page_id}", json=data)

    async def delete_page(self, page_id: str) -> Any:
        return await self._call("DELETE", f"/pages/{page_id}", f"delete page {page_id}")

    # Media

    async def get_media(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._call("GET", "/media", "get media", params=params)

    async def get_media_item(self, media_id: str) -> Any:
        return await self._call("GET", f"/media/{media_id}", f"get media {media_id}")

    async def upload_media(self, file_path: str, title: str = "") -> Any:
        path = Path(file_path).expanduser()
        try:
            content = path.read_bytes()
        except OSError as e:
            raise ExecutionError(f"Cannot read media file {file_path}: {e}") from e
        mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return await self._call(
            "POST",
            "/media",
            "upload media",
            files={"file": (path.name, content, mime)},
            data={"title": title} if title else None,
        )

    async def delete_media(self, media_id: str) -> Any:
        return await self._call("DELETE", f"/media/{media_id}", f"delete media {media_id}", params={"force": "true"})

    # Users

    async def get_users(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._call("GET", "/users", "get users", params=params)

    async def get_user(self, user_id: str) -> Any:
        return await self._call("GET", f"/users/{user_id}", f"get user {user_id}")

    async def create_user(self, data: Dict[str, Any]) -> Any:
        return await self._call("POST", "/users", "create user", json=data)

    async def update_user(self, user_id: str, data: Dict[str, Any]) -> Any:
        return await self._call("PUT", f"/users/{user_id}", f"update user {user_id}", json=data)

    async def delete_user(self, user_id: str, reassign: Optional[str] = None) -> Any:
        params = {"force": "true"}
        if reassign:
            params["reassign"] = reassign
        return await self._call("DELETE", f"/users/{user_id}", f"delete user {user_id}", params=params)

    # Categories

    async def get_categories(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._call("GET", "/categories", "get categories", params=params)

    async def get_category(self, category_id: str) -> Any:
        return await self._call("GET", f"/categories/{category_id}", f"get category {category_id}")

    async def create_category(self, data: Dict[str, Any]) -> Any:
        return await self._call("POST", "/categories", "create category", json=data)

    async def update_category(self, category_id: str, data: Dict[str, Any]) -> Any:
        return await self._call("PUT", f"/categories/{category_id}", f"update category {category_id}", json=data)

    async def delete_category(self, category_id: str) -> Any:
        return await self._call("DELETE", f"/categories/{category_id}", f"delete category {category_id}", params={"force": "true"})

    # Tags

    async def get_tags(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._call("GET", "/tags", "get tags", params=params)

    async def get_tag(self, tag_id: str) -> Any:
        return await self._call("GET", f"/tags/{tag_id}", f"get tag {tag_id}")

    async def create_tag(self, data: Dict[str, Any]) -> Any:
        return await self._call("POST", "/tags", "create tag", json=data)

    async def update_tag(self, tag_id: str, data: Dict[str, Any]) -> Any:
        return await self._call("PUT", f"/tags/{tag_id}", f"update tag {tag_id}", json=data)

    async def delete_tag(self, tag_id: str) -> Any:
        return await self._call("DELETE", f"/tags/{tag_id}", f"delete tag {tag_id}", params={"force": "true"})

    # Comments

    async def get_comments(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._call("GET", "/comments", "get comments", params=params)

    async def get_comment(self, comment_id: str) -> Any:
        return await self._call("GET", f"/comments/{comment_id}", f"get comment {comment_id}")

    async def create_comment(self, data: Dict[str, Any]) -> Any:
        return await self._call("POST", "/comments", "create comment", json=data)

    async def update_comment(self, comment_id: str, data: Dict[str, Any]) -> Any:
        return await self._call("PUT", f"/comments/{comment_id}", f"update comment {comment_id}", json=data)

    async def delete_comment(self, comment_id: str) -> Any:
        return await self._call("DELETE", f"/comments/{comment_id}", f"delete comment {comment_id}")

    # Menus (WP API Menus plugin namespace)

    async def get_menus(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._call("GET", f"{self.site_url}/wp-json/wp-api-menus/v2/menus", "get menus", params=params)

    async def get_menu(self, menu_id: str) -> Any:
        return await self._call("GET", f"{self.site_url}/wp-json/wp-api-menus/v2/menus/{menu_id}", f"get menu {menu_id}")

    # Plugins

    async def get_plugins(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._call("GET", "/plugins", "get plugins", params=params)

    async def get_plugin(self, plugin: str) -> Any:
        return await self._call("GET", f"/plugins/{plugin}", f"get plugin {plugin}")

    async def activate_plugin(self, plugin: str) -> Any:
        return await self._call("PUT", f"/plugins/{plugin}", f"activate plugin {plugin}", json={"status": "active"})

    async def deactivate_plugin(self, plugin: str) -> Any:
        return await self._call("PUT", f"/plugins/{plugin}", f"deactivate plugin {plugin}", json={"status": "inactive"})

    # Settings

    async def get_settings(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._call("GET", "/settings", "get settings", params=params)

    async def update_settings(self, data: Dict[str, Any]) -> Any:
        return await self._call("PUT", "/settings", "update settings", json=data)

    # Custom post types

    async def get_custom_posts(self, post_type: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._call("GET", f"/{post_type}", f"get {post_type}", params=params)

    async def get_custom_post(self, post_type: str, post_id: str) -> Any:
        return await self._call("GET", f"/{post_type}/{post_id}", f"get {post_type} {post_id}")

    async def create_custom_post(self, post_type: str, data: Dict[str, Any]) -> Any:
        return await self._call("POST", f"/{post_type}", f"create {post_type}", json=data)

    async def update_custom_post(self, post_type: str, post_id: str, data: Dict[str, Any]) -> Any:
        return await self._call("PUT", f"/{post_type}/{post_id}", f"update {post_type} {post_id}", json=data)

    async def delete_custom_post(self, post_type: str, post_id: str) -> Any:
        return await self._call("DELETE", f"/{post_type}/{post_id}", f"delete {post_type} {post_id}")

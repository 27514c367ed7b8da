"""HTTP client for the document and media API."""

from __future__ import annotations

from typing import Any, Final

import httpx

from settlernote.config import SETTLERNOTE_API_URL, SETTLERNOTE_HTTP_TIMEOUT_S
from settlernote.content_tree import dump_content, parse_document
from settlernote.exceptions import (
    DocumentNotFoundError,
    PermissionDeniedError,
    TransientNetworkError,
    UnauthorizedError,
    ValidationError,
)
from settlernote.schemas import (
    ContentNode,
    Document,
    DocumentSnapshot,
    DocumentTreeNode,
    MediaItem,
    Permission,
    PermissionRole,
    UserSummary,
)
from settlernote.utils.logging_config import get_logger

logger = get_logger(__name__)

SESSION_HEADER: Final[str] = "X-User-Email"

_STATUS_ERRORS: Final[dict[int, type[Exception]]] = {
    400: ValidationError,
    401: UnauthorizedError,
    403: PermissionDeniedError,
    404: DocumentNotFoundError,
    422: ValidationError,
}


def _content_payload(content: ContentNode | dict[str, Any]) -> dict[str, Any]:
    try:
        return dump_content(parse_document(content))
    except ValueError as exc:
        raise ValidationError(f"Invalid document content: {exc}") from exc


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code}"


class DocumentClient:
    """Async client for one signed-in user.

    Failures are mapped onto the library's exceptions and never retried:
    resubmitting is the caller's decision (auto-save simply waits for the
    next edit).
    """

    def __init__(
        self,
        base_url: str = SETTLERNOTE_API_URL,
        *,
        email: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = SETTLERNOTE_HTTP_TIMEOUT_S,
    ) -> None:
        self.email = email
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=httpx.Timeout(timeout))

    async def __aenter__(self) -> "DocumentClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        headers = {SESSION_HEADER: self.email, **kwargs.pop("headers", {})}
        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as exc:
            logger.warning("Request failed", extra={"method": method, "url": url, "error": str(exc)})
            raise TransientNetworkError(f"{method} {url} failed: {exc}") from exc

        if response.status_code in _STATUS_ERRORS:
            raise _STATUS_ERRORS[response.status_code](_error_message(response))
        if response.is_error:
            raise TransientNetworkError(f"HTTP {response.status_code} from {method} {url}: {_error_message(response)}")
        if not response.content:
            return None
        return response.json()

    # ---------- documents ----------

    async def list_documents(self, parent_id: str | None = None) -> list[Document]:
        params = {"parentId": parent_id} if parent_id else None
        data = await self._request("GET", "/api/documents", params=params)
        return [Document.model_validate(item) for item in data]

    async def document_tree(self) -> list[DocumentTreeNode]:
        data = await self._request("GET", "/api/documents/tree")
        return [DocumentTreeNode.model_validate(item) for item in data["tree"]]

    async def get_document(self, document_id: str) -> Document:
        data = await self._request("GET", f"/api/documents/{document_id}")
        return Document.model_validate(data)

    async def create_document(
        self,
        *,
        title: str = "Untitled",
        icon: str | None = None,
        parent_id: str | None = None,
        content: ContentNode | dict[str, Any] | None = None,
    ) -> Document:
        payload: dict[str, Any] = {"title": title, "icon": icon, "parentId": parent_id}
        if content is not None:
            payload["content"] = _content_payload(content)
        data = await self._request("POST", "/api/documents", json=payload)
        return Document.model_validate(data)

    async def update_document(self, document_id: str, **changes: Any) -> Document:
        """PATCH only the given fields (``title``, ``icon``, ``content``)."""
        payload = dict(changes)
        if payload.get("content") is not None:
            payload["content"] = _content_payload(payload["content"])
        data = await self._request("PATCH", f"/api/documents/{document_id}", json=payload)
        return Document.model_validate(data)

    async def save_snapshot(self, document_id: str, snapshot: DocumentSnapshot) -> Document:
        """Write a full title/icon/content snapshot, as auto-save does."""
        changes: dict[str, Any] = {"title": snapshot.title, "icon": snapshot.icon}
        if snapshot.content is not None:
            changes["content"] = snapshot.content
        return await self.update_document(document_id, **changes)

    async def delete_document(self, document_id: str) -> None:
        await self._request("DELETE", f"/api/documents/{document_id}")

    async def share_document(self, document_id: str, email: str, role: PermissionRole | str) -> Permission:
        data = await self._request(
            "POST",
            f"/api/documents/{document_id}/permissions",
            json={"email": email, "role": PermissionRole(role).value},
        )
        return Permission.model_validate(data)

    # ---------- media ----------

    async def list_media(self) -> list[MediaItem]:
        data = await self._request("GET", "/api/media")
        return [MediaItem.model_validate(item) for item in data["images"]]

    async def upload_media(self, filename: str, data: bytes, content_type: str) -> str:
        body = await self._request("POST", "/api/upload", files={"file": (filename, data, content_type)})
        return body["url"]

    # ---------- users ----------

    async def update_user(self, name: str) -> UserSummary:
        body = await self._request("PUT", "/api/user/update", json={"name": name})
        return UserSummary.model_validate(body["user"])

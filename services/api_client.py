"""Client for the backend API as consumed by the frontend application.

Calls go through the relay's public prefix (or straight to the backend) and
carry the ``Authorization: Token <value>`` header. Non-2xx answers raise
BackendApplicationError.
"""

from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from core.exceptions import BackendApplicationError

REPORT_ENDPOINT = "/dinamic-db/report/{document_id}/assesmentDEV"


class UserRegistration(BaseModel):
    """Registration payload; serialized with the backend's field names."""

    model_config = ConfigDict(populate_by_name=True)

    document_id: str = Field(alias="cedula")
    name: str = Field(alias="nombre")
    phone: str = Field(alias="telefono")
    city: str = Field(alias="ciudad")
    photo: str | None = Field(default=None, alias="foto")


class ApiClient:
    """Async HTTP client for the backend API."""

    def __init__(
        self,
        base_url: str,
        token: str = "",
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Token {self._token}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request and raise BackendApplicationError on non-2xx."""
        response = await self._client.request(
            method,
            f"{self.base_url}{endpoint}",
            json=json,
            headers=self._headers(headers),
        )
        if not response.is_success:
            try:
                data = response.json()
            except ValueError:
                data = {}
            message = data.get("message") if isinstance(data, dict) else None
            raise BackendApplicationError(
                message or "Request failed",
                status_code=response.status_code,
                data=data,
            )
        return response

    async def get_user_by_document(self, document_id: str) -> Any:
        """Fetch the assessment report for a document (cedula) number."""
        response = await self.request(
            "GET", REPORT_ENDPOINT.format(document_id=document_id)
        )
        return response.json()

    async def register_user(self, user: UserRegistration) -> Any:
        """Register a new user under their document number."""
        response = await self.request(
            "POST",
            REPORT_ENDPOINT.format(document_id=user.document_id),
            json=user.model_dump(by_alias=True, exclude_none=True),
        )
        return response.json()

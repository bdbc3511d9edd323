"""
Employee Dashboard Backend — HTTP Client
=========================================

What:  Async client for the /employees API.
Why:   Scripts, seed jobs and integration tests need the same five calls the
       form/list UI makes, with the token configured in exactly one place.
How:   Wraps an httpx.AsyncClient whose default headers carry the bearer
       token; every method returns the decoded JSON envelope.

Example:
    async with EmployeeApiClient("http://localhost:5000", token="s3cret") as api:
        page = await api.list_employees(page=1, limit=10, search="acme")
        created = await api.create_employee({"name": "Ada", "email": "ada@acme.io"})
"""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """A non-2xx response from the API, with the server's error message."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class EmployeeApiClient:
    """
    Thin async wrapper around the employee endpoints.

    Args:
        base_url:  API root, e.g. "http://localhost:5000"
        token:     The shared bearer secret
        transport: Optional httpx transport (tests pass an ASGITransport)
        timeout:   Per-request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {token}",
            },
        )

    async def __aenter__(self) -> "EmployeeApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Operations ────────────────────────────────────────────────────────

    async def list_employees(
        self, page: int = 1, limit: int = 10, search: str = ""
    ) -> Dict[str, Any]:
        return await self._request(
            "GET", "/employees", params={"page": page, "limit": limit, "search": search}
        )

    async def get_employee(self, employee_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/employees/{employee_id}")

    async def create_employee(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/employees", json=data)

    async def update_employee(self, employee_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", f"/employees/{employee_id}", json=data)

    async def delete_employee(self, employee_id: int) -> Dict[str, Any]:
        return await self._request("DELETE", f"/employees/{employee_id}")

    # ── Internals ─────────────────────────────────────────────────────────

    async def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        response = await self._client.request(method, url, **kwargs)
        if response.is_success:
            return response.json()

        if response.status_code == 401:
            logger.error("Unauthorized access - invalid or missing token")

        try:
            message = response.json().get("message", response.reason_phrase)
        except ValueError:
            message = response.text or response.reason_phrase
        raise ApiClientError(response.status_code, message)

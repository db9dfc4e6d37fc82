# expense_tracker/client.py
"""
Async client for the Expense Tracker API.

Attaches the bearer token to every call and turns error responses into
``ApiError`` (or ``AuthenticationError`` for 401s), carrying the server's
``message`` when there is one.
"""
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

UNREACHABLE_MESSAGE = "The server is not reachable. Please make sure the backend is running."
GENERIC_MESSAGE = "Something went wrong. Please try again."


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationError(ApiError):
    """The token is missing, invalid or expired; it has been discarded."""


class ExpenseTrackerClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.token = token
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "ExpenseTrackerClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.TransportError as e:
            logger.warning(f"{method} {url} failed: {e!r}")
            raise ApiError(UNREACHABLE_MESSAGE) from e

        if response.status_code == 401:
            self.token = None
            raise AuthenticationError(_error_message(response) or "Not authenticated", 401)
        if response.is_error:
            raise ApiError(_error_message(response) or GENERIC_MESSAGE, response.status_code)

        if not response.content:
            return None
        return response.json()

    # ------------------------------------------------------------
    # AUTH
    # ------------------------------------------------------------
    async def register(self, email: str, password: str, username: Optional[str] = None) -> Dict:
        payload = {"email": email, "password": password}
        if username:
            payload["username"] = username
        return await self._request("POST", "auth/register", json=payload)

    async def login(self, email: str, password: str) -> str:
        data = await self._request(
            "POST", "auth/jwt/login", data={"username": email, "password": password}
        )
        self.token = data["access_token"]
        return self.token

    def logout(self) -> None:
        self.token = None

    async def me(self) -> Dict:
        return await self._request("GET", "users/me")

    # ------------------------------------------------------------
    # CATEGORIES
    # ------------------------------------------------------------
    async def list_categories(self) -> list:
        return await self._request("GET", "categories")

    async def create_category(self, name: str, description: Optional[str] = None, type: Optional[str] = None) -> Dict:
        return await self._request(
            "POST", "categories", json={"name": name, "description": description, "type": type}
        )

    async def update_category(self, category_id: str, name: str, description: Optional[str] = None, type: Optional[str] = None) -> Dict:
        return await self._request(
            "PUT", f"categories/{category_id}", json={"name": name, "description": description, "type": type}
        )

    async def delete_category(self, category_id: str) -> Dict:
        return await self._request("DELETE", f"categories/{category_id}")

    # ------------------------------------------------------------
    # TRANSACTIONS
    # ------------------------------------------------------------
    async def list_transactions(self, **filters: Any) -> Dict:
        """Filters: q, type, category_id, start_date, end_date, sort_by, sort_order, page, limit."""
        params = {key: str(value) for key, value in filters.items() if value not in (None, "")}
        return await self._request("GET", "transactions", params=params)

    async def create_transaction(self, **fields: Any) -> Dict:
        return await self._request("POST", "transactions", json=_jsonable(fields))

    async def update_transaction(self, transaction_id: str, **fields: Any) -> Dict:
        return await self._request("PUT", f"transactions/{transaction_id}", json=_jsonable(fields))

    async def delete_transaction(self, transaction_id: str) -> Dict:
        return await self._request("DELETE", f"transactions/{transaction_id}")

    async def summary(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> Dict:
        params = {k: str(v) for k, v in {"start_date": start_date, "end_date": end_date}.items() if v}
        return await self._request("GET", "dashboard/summary", params=params)


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message") or body.get("detail")
    return None


def _jsonable(fields: Dict[str, Any]) -> Dict[str, Any]:
    # Dates, Decimals and UUIDs go over the wire as strings
    return {
        key: value if value is None or isinstance(value, (str, int, float, bool)) else str(value)
        for key, value in fields.items()
    }

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from client.errors import NetworkError, RequestRejected
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

ADMIN_HEADERS = {"x-admin": "true"}


class ShopClient:
    """
    Async client for the shop HTTP API.

    Every call either returns the decoded body or raises:
      - RequestRejected for a non-2xx answer (carries the body text)
      - NetworkError when no answer arrived
    No timeout is applied; a stalled call stays in flight.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url or config.API_URL
        self._http = httpx.AsyncClient(
            base_url=self.base_url, transport=transport, timeout=None
        )

    async def __aenter__(self) -> "ShopClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        admin: bool = False,
    ) -> httpx.Response:
        headers = ADMIN_HEADERS if admin else None
        try:
            res = await self._http.request(method, url, json=json, headers=headers)
        except httpx.HTTPError as e:
            _logger.warning(f"{method} {url} failed: {e!r}")
            raise NetworkError(str(e)) from e
        if res.is_error:
            _logger.info(f"{method} {url} rejected with {res.status_code}")
            raise RequestRejected(res.status_code, res.text)
        return res

    @staticmethod
    def _json(res: httpx.Response) -> Any:
        try:
            return res.json()
        except ValueError as e:
            raise RequestRejected(res.status_code, res.text) from e

    # ---------------------------
    # Users
    # ---------------------------

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        res = await self._request(
            "POST", "/users/login", json={"email": email, "password": password}
        )
        return self._json(res)

    async def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        res = await self._request(
            "POST",
            "/users/register",
            json={"name": name, "email": email, "password": password},
        )
        return self._json(res)

    # ---------------------------
    # Products
    # ---------------------------

    async def list_products(self) -> List[Dict[str, Any]]:
        res = await self._request("GET", "/products")
        return self._json(res) or []

    async def create_product(self, product: Dict[str, Any], admin: bool) -> int:
        res = await self._request("POST", "/products", json=product, admin=admin)
        return int(self._json(res)["id"])

    async def update_product(
        self, pid: int, product: Dict[str, Any], admin: bool
    ) -> str:
        res = await self._request("PUT", f"/products/{pid}", json=product, admin=admin)
        return res.text

    async def delete_product(self, pid: int, admin: bool) -> str:
        res = await self._request("DELETE", f"/products/{pid}", admin=admin)
        return res.text

    # ---------------------------
    # Orders
    # ---------------------------

    async def place_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        res = await self._request("POST", "/orders", json=payload)
        return self._json(res)

    async def list_orders(self, admin: bool) -> List[Dict[str, Any]]:
        res = await self._request("GET", "/orders", admin=admin)
        return self._json(res) or []

"""
Async HTTP clients for the adoption API and the upload service.

Each client owns its ``httpx.AsyncClient`` and its bearer token, so
several signed-in clients can coexist in one process.
"""

import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import httpx

from ..exceptions import AdoptCoreException
from ..recommendation import ScoredPet, recommend

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000/api/v1"
DEFAULT_UPLOAD_URL = "http://localhost:4000"
RECOMMENDATION_POOL_SIZE = 50
DEFAULT_TIMEOUT = 10.0


class ApiClientError(AdoptCoreException):
    """Raised when the API answers with an error status."""

    def __init__(self, status_code: int, message: str, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="API_CLIENT_ERROR", details={"payload": payload or {}})
        self.status_code = status_code
        self.payload = payload or {}


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if body.get("message"):
            return body["message"]
    return response.reason_phrase


class _BaseClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if response.is_error:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            raise ApiClientError(
                response.status_code,
                _error_message(response),
                payload if isinstance(payload, dict) else None,
            )
        if response.status_code == 204:
            return None
        return response.json()


class AdoptionClient(_BaseClient):
    """
    Client for the adoption REST API.

    Example:
        async with AdoptionClient.from_environment() as client:
            await client.login("user@example.com", "user123")
            pets = await client.list_pets(species=["guinea_pig"])
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(base_url, timeout=timeout, transport=transport)
        self.token = token

    @classmethod
    def from_environment(cls, token: Optional[str] = None) -> "AdoptionClient":
        return cls(os.getenv("ADOPT_API_URL", DEFAULT_API_URL), token=token)

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._http.request(method, path, headers=self._headers(), **kwargs)
        return self._json(response)

    async def register(self, username: str, email: str, password: str) -> Dict[str, Any]:
        body = await self._request(
            "POST", "/users/register",
            json={"username": username, "email": email, "password": password},
        )
        self.token = body["token"]
        return body["user"]

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        body = await self._request(
            "POST", "/users/login", json={"email": email, "password": password}
        )
        self.token = body["token"]
        return body["user"]

    def logout(self) -> None:
        self.token = None

    async def list_pets(
        self,
        species: Optional[List[str]] = None,
        size: Optional[List[str]] = None,
        page: int = 1,
        limit: int = 10,
        **filters: Any,
    ) -> Dict[str, Any]:
        """Fetch one page of the pet listing as ``{"data", "pagination"}``."""
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if species:
            params["species"] = ",".join(species)
        if size:
            params["size"] = ",".join(size)
        params.update({k: v for k, v in filters.items() if v is not None})
        return await self._request("GET", "/pets", params=params)

    async def get_pet(self, pet_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/pets/{pet_id}")

    async def validate_coupon(self, code: str, applies_to: str = "promotion") -> Dict[str, Any]:
        """
        Check a coupon. Invalid coupons return ``{"valid": False, "message"}``
        rather than raising.
        """
        response = await self._http.get(
            f"/promotions/coupons/{code}/validate",
            params={"applies_to": applies_to},
            headers=self._headers(),
        )
        if response.status_code in (400, 404):
            body = response.json()
            if isinstance(body, dict) and "valid" in body:
                return body
        return self._json(response)

    async def promote_pet(
        self,
        pet_id: str,
        coupon_code: Optional[str] = None,
        card: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Buy a promotion for a pet.

        When the coupon brings the fee to zero the card fields are left out
        of the request.
        """
        payload: Dict[str, Any] = {}
        free = False
        if coupon_code:
            payload["coupon_code"] = coupon_code
            check = await self.validate_coupon(coupon_code)
            free = bool(check.get("valid")) and Decimal(
                str(check["discount"]["final_fee"])
            ) == 0
        if card and not free:
            payload.update(
                {
                    key: card[key]
                    for key in ("card_number", "expiry_date", "cvv", "cardholder_name")
                    if key in card
                }
            )
        return await self._request("POST", f"/promotions/pets/{pet_id}", json=payload)

    async def fetch_recommendation_pool(self) -> List[Dict[str, Any]]:
        """
        Fetch available pets to score. A failed request or a body that is not
        JSON yields an empty pool.
        """
        try:
            response = await self._http.get(
                "/pets",
                params={"limit": RECOMMENDATION_POOL_SIZE, "show_adopted": "false"},
                headers=self._headers(),
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Could not fetch recommendation pool: {e}")
            return []
        return [pet for pet in body.get("data", []) if not pet.get("is_adopted")]

    async def recommend(self, answers: Mapping[str, str], limit: int = 3) -> List[ScoredPet]:
        return recommend(await self.fetch_recommendation_pool(), answers, limit=limit)


class ImageUploadClient(_BaseClient):
    """Client for the image upload service."""

    @classmethod
    def from_environment(cls) -> "ImageUploadClient":
        return cls(os.getenv("ADOPT_UPLOAD_URL", DEFAULT_UPLOAD_URL))

    async def upload(self, path: str, idempotency_key: Optional[str] = None) -> Dict[str, str]:
        """Upload an image file; returns ``{"filename", "url"}``."""
        file_path = Path(path)
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else {}
        response = await self._http.post(
            "/upload",
            files={"image": (file_path.name, file_path.read_bytes())},
            headers=headers,
        )
        return self._json(response)

    async def list_files(self) -> List[Dict[str, Any]]:
        return self._json(await self._http.get("/api/files"))["files"]

"""
Client for the ViettelPost administrative address registry.

Only the category endpoints (provinces, districts, wards) are used here.
Every failure to talk to the registry is raised as
AddressServiceUnavailableException so callers can tell "retry later" apart
from "wrong input".
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError

from core.config import settings
from core.exceptions import AddressServiceUnavailableException
from schemas.address import District, Province, Ward

logger = logging.getLogger(__name__)


class ViettelPostAddressRegistry:
    """Async address registry client backed by httpx"""

    def __init__(
        self,
        base_url: str = settings.ADDRESS_REGISTRY_URL,
        token: Optional[str] = settings.ADDRESS_REGISTRY_TOKEN,
        username: Optional[str] = settings.ADDRESS_REGISTRY_USERNAME,
        password: Optional[str] = settings.ADDRESS_REGISTRY_PASSWORD,
        timeout: float = settings.ADDRESS_REGISTRY_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token or ""
        self.username = username
        self.password = password
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def login(self) -> str:
        if not self.username or not self.password:
            raise AddressServiceUnavailableException("thiếu thông tin đăng nhập ViettelPost")

        logger.info("Logging in to ViettelPost with username: %s", self.username)
        try:
            async with self._client() as client:
                response = await client.post(
                    "/user/Login",
                    json={"USERNAME": self.username, "PASSWORD": self.password},
                )
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("ViettelPost login failed: %s", e)
            raise AddressServiceUnavailableException("đăng nhập ViettelPost thất bại") from e

        if not isinstance(body, dict):
            raise AddressServiceUnavailableException("phản hồi không hợp lệ")
        data = body.get("data")
        token = data.get("token") if isinstance(data, dict) and body.get("status") == 200 else None
        if not token:
            logger.error("ViettelPost login rejected: %s", body.get("message"))
            raise AddressServiceUnavailableException("đăng nhập ViettelPost thất bại")

        self.token = token
        return token

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        if not self.token:
            await self.login()

        response = await self._request(path, params)
        if response.status_code == 401 and self.username and self.password:
            logger.info("ViettelPost token expired, logging in again")
            await self.login()
            response = await self._request(path, params)

        if response.status_code >= 400:
            logger.error("ViettelPost %s returned HTTP %s", path, response.status_code)
            raise AddressServiceUnavailableException(f"HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise AddressServiceUnavailableException("phản hồi không hợp lệ") from e
        if not isinstance(body, dict):
            raise AddressServiceUnavailableException("phản hồi không hợp lệ")

        if body.get("status") != 200 or body.get("error"):
            logger.error("ViettelPost API error on %s: %s", path, body.get("message"))
            raise AddressServiceUnavailableException(body.get("message") or "lỗi không xác định")
        return body.get("data") or []

    async def _request(self, path: str, params: Optional[Dict[str, Any]]) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.get(path, params=params, headers={"Token": self.token})
        except httpx.TimeoutException as e:
            logger.error("ViettelPost request to %s timed out", path)
            raise AddressServiceUnavailableException("hết thời gian chờ") from e
        except httpx.HTTPError as e:
            logger.error("ViettelPost request to %s failed: %s", path, e)
            raise AddressServiceUnavailableException("không kết nối được") from e

    async def list_provinces(self) -> List[Province]:
        rows = await self._get("/categories/listProvinceById", {"provinceId": -1})
        return _parse(rows, lambda r: Province(
            id=r["PROVINCE_ID"],
            name=r.get("PROVINCE_NAME", ""),
            code=r.get("PROVINCE_CODE"),
        ))

    async def list_districts(self, province_id: int) -> List[District]:
        rows = await self._get("/categories/listDistrict", {"provinceId": province_id})
        return _parse(rows, lambda r: District(
            id=r["DISTRICT_ID"],
            name=r.get("DISTRICT_NAME", ""),
            province_id=r.get("PROVINCE_ID", province_id),
            code=r.get("DISTRICT_VALUE"),
        ))

    async def list_wards(self, district_id: int) -> List[Ward]:
        rows = await self._get("/categories/listWards", {"districtId": district_id})
        return _parse(rows, lambda r: Ward(
            id=r["WARDS_ID"],
            name=r.get("WARDS_NAME", ""),
            district_id=r.get("DISTRICT_ID", district_id),
        ))


def _parse(rows: List[Dict[str, Any]], build: Callable[[Dict[str, Any]], Any]) -> list:
    try:
        return [build(r) for r in rows]
    except (KeyError, TypeError, ValidationError) as e:
        logger.error("Unexpected ViettelPost record shape: %s", e)
        raise AddressServiceUnavailableException("dữ liệu địa chỉ không hợp lệ") from e

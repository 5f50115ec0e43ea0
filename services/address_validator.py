"""
Validates a (province, district, ward) triple against the address registry.

Each level is looked up under the identifier resolved at the previous level,
so a real ward paired with an unrelated district is rejected.
"""

import logging
from typing import Iterable, Optional, Protocol, TypeVar

from core.exceptions import (
    InvalidDistrictException,
    InvalidProvinceException,
    InvalidWardException,
)
from schemas.address import District, Province, ResolvedAddress, Ward

logger = logging.getLogger(__name__)

T = TypeVar("T", Province, District, Ward)


class AddressRegistry(Protocol):
    async def list_provinces(self) -> list: ...

    async def list_districts(self, province_id: int) -> list: ...

    async def list_wards(self, district_id: int) -> list: ...


def _find_by_code(records: Iterable[T], code: str) -> Optional[T]:
    code = str(code).strip()
    for record in records:
        if str(record.id) == code:
            return record
    return None


class AddressValidator:

    def __init__(self, registry: AddressRegistry):
        self.registry = registry

    async def validate(self, province_code: str, district_code: str, ward_code: str) -> ResolvedAddress:
        province = _find_by_code(await self.registry.list_provinces(), province_code)
        if province is None:
            raise InvalidProvinceException(province_code)

        district = _find_by_code(await self.registry.list_districts(province.id), district_code)
        if district is None:
            raise InvalidDistrictException(district_code, province_code)

        ward = _find_by_code(await self.registry.list_wards(district.id), ward_code)
        if ward is None:
            raise InvalidWardException(ward_code, district_code)

        logger.debug("Address validated: %s / %s / %s", province.name, district.name, ward.name)
        return ResolvedAddress(province=province, district=district, ward=ward)

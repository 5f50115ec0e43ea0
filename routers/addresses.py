from fastapi import APIRouter, Depends
from typing import List
from core.dependencies import get_current_user, get_address_registry
from schemas.address import Province, District, Ward
from services.address_registry import ViettelPostAddressRegistry

router = APIRouter(prefix="/addresses", tags=["Addresses"])


# GET /addresses/provinces - Danh sách tỉnh/thành phố
@router.get("/provinces", response_model=List[Province])
async def list_provinces(
    current_user: dict = Depends(get_current_user),
    registry: ViettelPostAddressRegistry = Depends(get_address_registry),
):
    return await registry.list_provinces()


# GET /addresses/provinces/{province_id}/districts - Quận/huyện theo tỉnh
@router.get("/provinces/{province_id}/districts", response_model=List[District])
async def list_districts(
    province_id: int,
    current_user: dict = Depends(get_current_user),
    registry: ViettelPostAddressRegistry = Depends(get_address_registry),
):
    return await registry.list_districts(province_id)


# GET /addresses/districts/{district_id}/wards - Phường/xã theo quận
@router.get("/districts/{district_id}/wards", response_model=List[Ward])
async def list_wards(
    district_id: int,
    current_user: dict = Depends(get_current_user),
    registry: ViettelPostAddressRegistry = Depends(get_address_registry),
):
    return await registry.list_wards(district_id)

# schemas/address.py
from pydantic import BaseModel
from typing import Optional


class Province(BaseModel):
    id: int
    name: str
    code: Optional[str] = None


class District(BaseModel):
    id: int
    name: str
    province_id: Optional[int] = None
    code: Optional[str] = None


class Ward(BaseModel):
    id: int
    name: str
    district_id: Optional[int] = None


class ResolvedAddress(BaseModel):
    province: Province
    district: District
    ward: Ward

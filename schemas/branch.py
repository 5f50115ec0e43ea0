# schemas/branch.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class BranchBase(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)
    contact: Optional[str] = None
    province_code: Optional[str] = None
    district_code: Optional[str] = None
    ward_code: Optional[str] = None

    def address_codes(self) -> List[Optional[str]]:
        return [self.province_code, self.district_code, self.ward_code]


class BranchCreate(BranchBase):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)


class BranchUpdate(BranchBase):
    pass


class BranchOut(BaseModel):
    id: str
    name: str
    address: str
    contact: Optional[str] = None
    province_code: str
    district_code: str
    ward_code: str
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class BranchListOut(BaseModel):
    data: List[BranchOut]
    pagination: Pagination


class BranchProductsCount(BaseModel):
    branch_id: str
    products_count: int
    branch_name: str


class BranchStatistics(BaseModel):
    total_branches: int


class BranchForceDeleteResult(BaseModel):
    success: bool
    message: str
    products_updated: int

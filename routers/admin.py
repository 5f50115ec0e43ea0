from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from typing import Optional
from core.dependencies import get_current_user, get_branch_service
from schemas.branch import (
    BranchCreate,
    BranchUpdate,
    BranchOut,
    BranchListOut,
    BranchProductsCount,
    BranchStatistics,
    BranchForceDeleteResult,
)
from services.branch_service import BranchService

router = APIRouter(prefix="/admin", tags=["Admin"])

# ===================== Common & Guards =====================

async def verify_admin(current_user: dict = Depends(get_current_user)):
    if current_user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Chỉ admin mới được truy cập")
    return current_user

# ===================== Branches =====================

@router.post("/branches", response_model=BranchOut, status_code=201)
async def create_branch(
    payload: BranchCreate,
    current_user: dict = Depends(verify_admin),
    service: BranchService = Depends(get_branch_service),
):
    return await service.create(payload)

@router.get("/branches/statistics", response_model=BranchStatistics)
async def branch_statistics(
    current_user: dict = Depends(verify_admin),
    service: BranchService = Depends(get_branch_service),
):
    return await service.statistics()

@router.get("/branches", response_model=BranchListOut)
async def list_branches(
    search: Optional[str] = Query(None, description="Tìm theo tên/địa chỉ/liên hệ"),
    sort: Optional[str] = Query(None, description="Ví dụ: name,asc hoặc created_at,desc"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(verify_admin),
    service: BranchService = Depends(get_branch_service),
):
    return await service.list(page=page, limit=limit, search=search, sort=sort)

@router.get("/branches/{branch_id}", response_model=BranchOut)
async def get_branch(
    branch_id: str,
    current_user: dict = Depends(verify_admin),
    service: BranchService = Depends(get_branch_service),
):
    return await service.get(branch_id)

@router.put("/branches/{branch_id}", response_model=BranchOut)
async def update_branch(
    branch_id: str,
    payload: BranchUpdate,
    current_user: dict = Depends(verify_admin),
    service: BranchService = Depends(get_branch_service),
):
    return await service.update(branch_id, payload)

@router.delete("/branches/{branch_id}")
async def delete_branch(
    branch_id: str,
    current_user: dict = Depends(verify_admin),
    service: BranchService = Depends(get_branch_service),
):
    await service.delete(branch_id)
    return {"message": "Đã xóa chi nhánh", "branch_id": branch_id}

@router.get("/branches/{branch_id}/products-count", response_model=BranchProductsCount)
async def branch_products_count(
    branch_id: str,
    current_user: dict = Depends(verify_admin),
    service: BranchService = Depends(get_branch_service),
):
    return await service.products_count(branch_id)

@router.delete("/branches/{branch_id}/force", response_model=BranchForceDeleteResult)
async def force_delete_branch(
    branch_id: str,
    background_tasks: BackgroundTasks,
    current_user: dict = Depends(verify_admin),
    service: BranchService = Depends(get_branch_service),
):
    return await service.delete_with_cascade(branch_id, background_tasks)

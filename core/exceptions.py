"""
Custom exception classes for the shop API.
Every error carries an HTTP status, a user-facing detail and a stable error_code.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class ShopException(HTTPException):
    """Base exception class for the shop application"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class ValidationException(ShopException):
    """400 Bad Request"""

    def __init__(self, detail: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code,
        )


class NotFoundException(ShopException):
    """404 Not Found"""

    def __init__(self, detail: str = "Not found", error_code: str = "NOT_FOUND"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code,
        )


class ConflictException(ShopException):
    """409 Conflict"""

    def __init__(self, detail: str, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code,
        )


class ExternalServiceException(ShopException):
    """503 Service Unavailable"""

    def __init__(
        self,
        detail: str = "Service temporarily unavailable",
        error_code: str = "SERVICE_UNAVAILABLE",
    ):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            error_code=error_code,
        )


class InternalServerException(ShopException):
    """500 Internal Server Error"""

    def __init__(self, detail: str = "Internal server error", error_code: str = "INTERNAL_ERROR"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=error_code,
        )


# Address validation

class IncompleteAddressException(ValidationException):
    def __init__(self):
        super().__init__(
            detail="Phải cung cấp đầy đủ tỉnh/thành, quận/huyện và phường/xã",
            error_code="INCOMPLETE_ADDRESS",
        )


class InvalidProvinceException(ValidationException):
    def __init__(self, province_code: str):
        self.province_code = province_code
        super().__init__(
            detail=f"Mã tỉnh/thành phố {province_code} không hợp lệ",
            error_code="INVALID_PROVINCE",
        )


class InvalidDistrictException(ValidationException):
    """The district is not a child of the resolved province."""

    def __init__(self, district_code: str, province_code: str):
        self.district_code = district_code
        self.province_code = province_code
        super().__init__(
            detail=f"Mã quận/huyện {district_code} không thuộc tỉnh/thành phố {province_code}",
            error_code="INVALID_DISTRICT",
        )


class InvalidWardException(ValidationException):
    def __init__(self, ward_code: str, district_code: str):
        self.ward_code = ward_code
        self.district_code = district_code
        super().__init__(
            detail=f"Mã phường/xã {ward_code} không thuộc quận/huyện {district_code}",
            error_code="INVALID_WARD",
        )


class AddressServiceUnavailableException(ExternalServiceException):
    def __init__(self, reason: str = ""):
        self.reason = reason
        detail = "Dịch vụ kiểm tra địa chỉ tạm thời không khả dụng"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(detail=detail, error_code="ADDRESS_SERVICE_UNAVAILABLE")


# Branches

class BranchNotFoundException(NotFoundException):
    def __init__(self, branch_id: str):
        self.branch_id = branch_id
        super().__init__(
            detail=f"Không tìm thấy chi nhánh với ID: {branch_id}",
            error_code="BRANCH_NOT_FOUND",
        )


class BranchInUseException(ConflictException):
    """Branch is still referenced by product inventory"""

    def __init__(self, branch_id: str, count: int):
        self.branch_id = branch_id
        self.count = count
        super().__init__(
            detail=f"Chi nhánh đang được sử dụng bởi {count} sản phẩm",
            error_code="BRANCH_IN_USE",
        )


# Cart

class VariantNotFoundException(NotFoundException):
    def __init__(self, product_id: str, variant_id: str):
        self.product_id = product_id
        self.variant_id = variant_id
        super().__init__(
            detail=f"Biến thể với ID {variant_id} không thuộc sản phẩm {product_id}",
            error_code="VARIANT_NOT_FOUND",
        )


class CartItemNotFoundException(NotFoundException):
    def __init__(self, variant_id: str):
        self.variant_id = variant_id
        super().__init__(
            detail=f"Không tìm thấy sản phẩm với biến thể ID {variant_id} trong giỏ hàng",
            error_code="CART_ITEM_NOT_FOUND",
        )


class CartItemRemovedException(NotFoundException):
    """The item's product or variant disappeared; it was dropped from the cart."""

    def __init__(self, variant_id: str):
        self.variant_id = variant_id
        super().__init__(
            detail=f"Biến thể với ID {variant_id} không còn tồn tại. Mục đã bị xóa khỏi giỏ hàng",
            error_code="CART_ITEM_REMOVED",
        )


class InsufficientStockException(ConflictException):
    def __init__(self, available: int, requested: int):
        self.available = available
        self.requested = requested
        super().__init__(
            detail=f"Không đủ hàng tồn kho. Chỉ còn {available}, bạn yêu cầu {requested}",
            error_code="INSUFFICIENT_STOCK",
        )


class ConcurrentCartUpdateException(ConflictException):
    def __init__(self):
        super().__init__(
            detail="Giỏ hàng vừa được cập nhật ở nơi khác, vui lòng thử lại",
            error_code="CONCURRENT_CART_UPDATE",
        )

"""
Wire-level models exchanged with the inventory backend.

Field names follow Python conventions; aliases carry the camelCase names the
backend expects, so ``model_dump(by_alias=True)`` produces the request payload
and ``model_validate`` accepts the response payload directly.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator

logger = logging.getLogger(__name__)


class InventoryRecord(BaseModel):
    """Canonical inventory row, one per product line in the source file."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    serial_no: Optional[int] = Field(default=None, alias="serialNo")
    product_name: str = Field(alias="productName", min_length=1)
    composition: Optional[str] = None
    company: Optional[str] = None
    category: Optional[str] = None
    pack_size: Optional[str] = Field(default=None, alias="packSize")
    inventory_qty: int = Field(default=0, alias="inventoryQty")
    inventory_type: Optional[str] = Field(default=None, alias="inventoryType")
    mrp: Optional[Decimal] = None
    selling_price: Decimal = Field(default=Decimal("0"), alias="sellingPrice", ge=0)
    used_in: Optional[str] = Field(default=None, alias="usedIn")
    precautions: Optional[str] = None
    image_url_1: Optional[str] = Field(default=None, alias="imageUrl1")
    image_url_2: Optional[str] = Field(default=None, alias="imageUrl2")
    prescription_info: Optional[str] = Field(default=None, alias="prescriptionInfo")

    @field_validator("product_name")
    def validate_product_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("productName cannot be blank")
        return normalized

    @field_serializer("mrp", "selling_price")
    def serialize_price(self, value: Optional[Decimal]) -> Optional[float]:
        # The backend reads prices as JSON numbers, not strings.
        return float(value) if value is not None else None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class UploadError(BaseModel):
    """One item-level (or synthetic chunk-level) upload failure."""
    model_config = ConfigDict(populate_by_name=True)

    serial_no: Optional[int] = Field(default=None, alias="serialNo")
    product_name: Optional[str] = Field(default=None, alias="productName")
    error_message: str = Field(default="Unknown error", alias="errorMessage")

    @field_validator("error_message", mode="before")
    def default_blank_message(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return "Unknown error"
        return value

    @classmethod
    def from_response(cls, payload: Any) -> "UploadError":
        """Build from a server error entry, tolerating malformed entries."""
        if isinstance(payload, dict):
            try:
                return cls.model_validate(payload)
            except ValidationError as exc:
                logger.warning("Malformed upload error entry %r: %s", payload, exc)
        return cls(error_message=str(payload))


class DeleteItem(BaseModel):
    """Product to remove from a store's inventory."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    product_name: Optional[str] = Field(default=None, alias="productName")
    medicine_id: Optional[str] = Field(default=None, alias="medicineId")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class BulkDeleteError(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_name: Optional[str] = Field(default=None, alias="productName")
    medicine_id: Optional[str] = Field(default=None, alias="medicineId")
    error: str = "Unknown error"

    @classmethod
    def from_response(cls, payload: Any) -> "BulkDeleteError":
        if isinstance(payload, dict):
            try:
                return cls.model_validate(payload)
            except ValidationError as exc:
                logger.warning("Malformed bulk delete error entry %r: %s", payload, exc)
        return cls(error=str(payload))

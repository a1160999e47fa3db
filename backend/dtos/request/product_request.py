"""
Product Request DTOs

DTOs for product-related API requests.
"""

from pydantic import BaseModel, Field, validator
from typing import List, Optional


class ImageDescriptorPayload(BaseModel):
    """Image descriptor as sent by clients when attaching uploads to a product."""

    url: str = Field(min_length=1, description="Public path of the transcoded image")
    alt: str = Field("", description="Alternative text")
    is_primary: bool = Field(False, alias="isPrimary", description="Whether this is the main image")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


class ProductCreateRequest(BaseModel):
    """
    Request DTO for creating a product.

    Unknown keys are ignored; required keys are validated at the boundary.
    """

    product_id: str = Field(min_length=1, description="External product identifier (unique)")
    name: str = Field(min_length=1, description="Product name")
    category: str = Field(min_length=1, description="Product category")
    price: float = Field(ge=0, description="Unit price")
    description: str = Field("", description="Long description")
    tags: List[str] = Field(default_factory=list, description="Search tags")
    inventory_count: int = Field(0, ge=0, description="Units in stock")
    brand: Optional[str] = Field(None, description="Brand name")
    material: Optional[str] = None
    available_sizes: List[str] = Field(default_factory=list)
    color: Optional[str] = None
    settings: List[str] = Field(default_factory=list)
    weight_lb: Optional[float] = Field(None, ge=0)
    image_url: str = Field("", alias="imageUrl", description="Legacy single image url")
    images: List[ImageDescriptorPayload] = Field(default_factory=list)

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "product_id": "SPW001",
                "name": "Trail Running Jacket",
                "category": "Sportswear",
                "price": 89.99,
                "tags": ["running", "outdoor"],
                "inventory_count": 25,
                "brand": "AirStride",
                "material": "Nylon",
                "available_sizes": ["S", "M", "L"]
            }
        }

    def to_record(self) -> dict:
        """Column values for a new Product row."""
        record = self.model_dump(exclude={"images"})
        record["images"] = [img.model_dump(by_alias=True) for img in self.images]
        return record


class ProductUpdateRequest(BaseModel):
    """
    Request DTO for a partial product update.

    Only the keys present in the request body are applied (merge semantics).
    """

    product_id: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    inventory_count: Optional[int] = Field(None, ge=0)
    brand: Optional[str] = None
    material: Optional[str] = None
    available_sizes: Optional[List[str]] = None
    color: Optional[str] = None
    settings: Optional[List[str]] = None
    weight_lb: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = Field(None, alias="imageUrl")
    images: Optional[List[ImageDescriptorPayload]] = None

    class Config:
        """Pydantic configuration."""
        populate_by_name = True

    @validator("product_id", "name", "category", "price", "inventory_count")
    def reject_null(cls, v):
        """Required product fields may be changed but not cleared."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    def to_changes(self) -> dict:
        """Only the fields the client actually supplied."""
        changes = self.model_dump(exclude_unset=True, exclude={"images"})
        if "images" in self.model_fields_set:
            changes["images"] = [img.model_dump(by_alias=True) for img in (self.images or [])]
        return changes

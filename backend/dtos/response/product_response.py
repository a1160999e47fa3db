"""
Product Response DTOs

DTOs for product-related API responses.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional


class ImageDescriptorResponse(BaseModel):
    """Transcoded image reference."""

    url: str = Field(description="Public path of the transcoded image")
    alt: str = Field("", description="Alternative text")
    is_primary: bool = Field(False, alias="isPrimary", description="Whether this is the main image")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        from_attributes = True


class ProductResponse(BaseModel):
    """
    Response DTO for a stored product.

    Separates the API response from the database model,
    allowing them to evolve independently.
    """

    id: str = Field(description="Storage id (24 hex characters)")
    product_id: str
    name: str
    category: str
    price: float
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    inventory_count: int = 0
    brand: Optional[str] = None
    material: Optional[str] = None
    available_sizes: List[str] = Field(default_factory=list)
    color: Optional[str] = None
    settings: List[str] = Field(default_factory=list)
    weight_lb: Optional[float] = None
    image_url: str = ""
    images: List[ImageDescriptorResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        """Pydantic configuration."""
        from_attributes = True  # Allow creation from ORM models


class DeleteResponse(BaseModel):
    message: str

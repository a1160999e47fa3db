"""
Upload Response DTOs
"""

from pydantic import BaseModel, Field
from typing import List

from .product_response import ImageDescriptorResponse


class UploadResponse(BaseModel):
    """Descriptors of the transcoded images, in submission order."""

    files: List[ImageDescriptorResponse] = Field(description="One descriptor per uploaded file")

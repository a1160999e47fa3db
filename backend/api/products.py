from fastapi import APIRouter, Depends, File, UploadFile
from typing import List, Optional
import logging
import secrets

from constants import HTTPStatus
from dependencies import get_current_user, get_product_repository, get_upload_pipeline
from dtos.request.product_request import ProductCreateRequest, ProductUpdateRequest
from dtos.response.product_response import DeleteResponse, ImageDescriptorResponse, ProductResponse
from dtos.response.upload_response import UploadResponse
from repositories.product_repository import ProductRepository
from services.interfaces import AuthenticatedUser
from services.upload_pipeline import UploadPipeline
from utils.error_handlers import handle_api_errors
from utils.logging_utils import clear_logging_context, set_logging_context

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/products/upload", response_model=UploadResponse)
@handle_api_errors("Image upload")
async def upload_product_images(
    images: Optional[List[UploadFile]] = File(None),
    user: AuthenticatedUser = Depends(get_current_user),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
):
    """
    Upload up to 6 product images (field `images`, 5 MiB each,
    jpeg/jpg/png/webp/gif).

    Each image is re-oriented, fitted inside 1600x1600 and stored as WebP.
    The returned descriptors follow submission order and can be attached
    to a product through `images` on create/update.

    Raises:
        HTTPException: 400 on a rejected batch, 500 if processing fails
    """
    batch_id = secrets.token_hex(4)
    set_logging_context(batch_id=batch_id, user_id=user.id)
    try:
        descriptors = await pipeline.process(images or [], batch_id=batch_id)
    finally:
        clear_logging_context()
    return UploadResponse(files=[ImageDescriptorResponse(**d.to_dict()) for d in descriptors])


@router.get("/products", response_model=List[ProductResponse])
@handle_api_errors("Get products")
def get_products(repo: ProductRepository = Depends(get_product_repository)):
    """Get all products"""
    return [ProductResponse.model_validate(p) for p in repo.list_products()]


@router.get("/products/{product_id}", response_model=ProductResponse)
@handle_api_errors("Get product")
def get_product(product_id: str, repo: ProductRepository = Depends(get_product_repository)):
    """
    Get a single product by its storage id

    Raises:
        HTTPException: 404 if no product has this id
    """
    return ProductResponse.model_validate(repo.get_product(product_id))


@router.post("/products", response_model=ProductResponse, status_code=HTTPStatus.CREATED)
@handle_api_errors("Create product")
def create_product(
    payload: ProductCreateRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    repo: ProductRepository = Depends(get_product_repository),
):
    """
    Create a product (authentication required)

    Raises:
        HTTPException: 409 if product_id is already in use
    """
    product = repo.create_product(payload.to_record())
    logger.info(f"User {user.id} created product {product.product_id}")
    return ProductResponse.model_validate(product)


@router.put("/products/{product_id}", response_model=ProductResponse)
@handle_api_errors("Update product")
def update_product(
    product_id: str,
    payload: ProductUpdateRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    repo: ProductRepository = Depends(get_product_repository),
):
    """
    Partially update a product: only the supplied fields change

    Raises:
        HTTPException: 404 if the product does not exist, 409 on a product_id clash
    """
    return ProductResponse.model_validate(repo.update_product(product_id, payload.to_changes()))


@router.delete("/products/{product_id}", response_model=DeleteResponse)
@handle_api_errors("Delete product")
def delete_product(
    product_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    repo: ProductRepository = Depends(get_product_repository),
):
    """
    Delete a product (authentication required)

    Raises:
        HTTPException: 404 if the product does not exist
    """
    return repo.delete_product(product_id)

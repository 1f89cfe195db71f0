"""
Jojárts API — Image Route Handlers
====================================

What:  Gallery endpoints.

    GET    /api/images        open    newest first, [{id, url, label}]
    POST   /api/images        bearer  201 {id, url, label}
    PUT    /api/images/{id}   bearer  200 {id, url, label}
    DELETE /api/images/{id}   bearer  200 {id}

Routes stay thin: ImageCatalog owns validation and not-found handling and
raises domain exceptions that the global handlers translate.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.middleware.auth import require_admin
from app.schemas.common import ErrorResponse
from app.schemas.image import (
    ImageCreate,
    ImageDeleteResponse,
    ImageResponse,
    ImageUpdate,
    PhotoRecord,
)
from app.services.image_catalog import image_catalog
from app.services.token_service import TokenClaims

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/images", tags=["Images"])

_UNAUTHORIZED = {401: {"description": "Missing or invalid token", "model": ErrorResponse}}
_NOT_FOUND = {404: {"description": "Image not found", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[ImageResponse],
    summary="List gallery images, newest first",
)
async def list_images(db: AsyncSession = Depends(get_db_session)) -> List[PhotoRecord]:
    return await image_catalog.list_images(db)


@router.post(
    "",
    status_code=201,
    response_model=ImageResponse,
    responses={
        400: {"description": "Image URL missing", "model": ErrorResponse},
        **_UNAUTHORIZED,
    },
    summary="Add an uploaded image to the gallery",
)
async def create_image(
    admin: TokenClaims = Depends(require_admin),
    body: Optional[ImageCreate] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> PhotoRecord:
    """Store the URL (and optional label) the image host returned."""
    body = body or ImageCreate()
    record = await image_catalog.create_image(db, url=body.url, label=body.label)
    logger.info("Admin '%s' added image %s", admin.username, record.id)
    return record


@router.put(
    "/{image_id}",
    response_model=ImageResponse,
    responses={
        400: {"description": "Image URL empty", "model": ErrorResponse},
        **_UNAUTHORIZED,
        **_NOT_FOUND,
    },
    summary="Replace an image's URL and/or label",
)
async def update_image(
    image_id: str,
    admin: TokenClaims = Depends(require_admin),
    body: Optional[ImageUpdate] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> PhotoRecord:
    """Fields left out of the body keep their current values."""
    record = await image_catalog.update_image(db, image_id, body or ImageUpdate())
    logger.info("Admin '%s' updated image %s", admin.username, record.id)
    return record


@router.delete(
    "/{image_id}",
    response_model=ImageDeleteResponse,
    responses={**_UNAUTHORIZED, **_NOT_FOUND},
    summary="Delete an image record",
)
async def delete_image(
    image_id: str,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ImageDeleteResponse:
    deleted_id = await image_catalog.remove_image(db, image_id)
    logger.info("Admin '%s' deleted image %s", admin.username, deleted_id)
    return ImageDeleteResponse(id=deleted_id)

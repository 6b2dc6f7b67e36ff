from dataclasses import asdict
from typing import List, Optional
from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session
import logging

from ..core.config import ImageUploadConfig, settings
from ..db.session import get_session
from ..exceptions import APIException
from ..services.auth import user_id_from_token
from ..schemas.common.common import ErrorResponse, MessageResponse
from ..schemas.images.image import ImageResponse, ImageRenameRequest
from ..application.ports.image_repo import ImageDto
from ..application.ports.storage_repo import ObjectStorage
from ..application.services.image_service import ImageService
from ..application.services.upload_gate import check_image_upload
from ..infrastructure.audit.std_logger import StdAuditLogger
from ..infrastructure.storage import get_object_storage
from ..infrastructure.persistence.sqlalchemy.repositories.image_repository_sql import SqlImageRepository
from ..infrastructure.persistence.sqlalchemy.repositories.folder_repository_sql import SqlFolderRepository

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/images",
    tags=["Images"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)

oauth2_scheme = HTTPBearer(auto_error=False)


def get_current_user(request: Request, credentials: HTTPAuthorizationCredentials = Depends(oauth2_scheme)) -> str:
    token = None
    if credentials and credentials.credentials:
        token = credentials.credentials
    else:
        token = request.cookies.get("access_token")
    if not token:
        raise HTTPException(status_code=401, detail="No token, authorization denied")
    user_id = user_id_from_token(token)
    if not user_id:
        logger.warning("JWT token rejected - invalid, expired or missing subject")
        raise HTTPException(status_code=401, detail="Token is not valid")
    return user_id


def get_upload_config() -> ImageUploadConfig:
    return settings.upload_config()


def get_image_service(
    session: Session = Depends(get_session),
    storage: ObjectStorage = Depends(get_object_storage),
    config: ImageUploadConfig = Depends(get_upload_config),
) -> ImageService:
    return ImageService(
        image_repo=SqlImageRepository(session),
        folder_repo=SqlFolderRepository(session),
        storage=storage,
        audit=StdAuditLogger(),
        config=config,
    )


def validated_image(
    image: Optional[UploadFile] = File(None),
    config: ImageUploadConfig = Depends(get_upload_config),
) -> Optional[UploadFile]:
    return check_image_upload(image, config)


def _to_response(image: ImageDto) -> ImageResponse:
    return ImageResponse.model_validate(asdict(image))


@router.get("", response_model=List[ImageResponse])
def list_images(
    folder: Optional[str] = Query(None),
    current_user: str = Depends(get_current_user),
    image_service: ImageService = Depends(get_image_service),
):
    try:
        images = image_service.list_images(current_user, folder)
        return [_to_response(i) for i in images]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get images error: {str(e)}", exc_info=True)
        raise APIException(status_code=500, detail="Server error while fetching images")


@router.get("/search", response_model=List[ImageResponse])
def search_images(
    q: Optional[str] = Query(None),
    current_user: str = Depends(get_current_user),
    image_service: ImageService = Depends(get_image_service),
):
    try:
        images = image_service.search_images(current_user, q)
        return [_to_response(i) for i in images]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Search images error: {str(e)}", exc_info=True)
        raise APIException(status_code=500, detail="Server error while searching images")


@router.post("/upload", response_model=ImageResponse, status_code=201)
def upload_image(
    current_user: str = Depends(get_current_user),
    image: Optional[UploadFile] = Depends(validated_image),
    name: Optional[str] = Form(None),
    folder_id: Optional[str] = Form(None, alias="folderId"),
    image_service: ImageService = Depends(get_image_service),
):
    try:
        created = image_service.upload_image(current_user, name, folder_id, image)
        logger.info(f"User {current_user} uploaded image {created.id}")
        return _to_response(created)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Upload image error: {str(e)}", exc_info=True)
        raise APIException(status_code=500, detail="Server error while uploading image")


@router.put("/{image_id}", response_model=ImageResponse)
def rename_image(
    image_id: str,
    payload: Optional[ImageRenameRequest] = Body(None),
    current_user: str = Depends(get_current_user),
    image_service: ImageService = Depends(get_image_service),
):
    try:
        renamed = image_service.rename_image(current_user, image_id, payload.name if payload else None)
        return _to_response(renamed)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Update image error: {str(e)}", exc_info=True)
        raise APIException(status_code=500, detail="Server error while updating image")


@router.delete("/{image_id}", response_model=MessageResponse)
def delete_image(
    image_id: str,
    current_user: str = Depends(get_current_user),
    image_service: ImageService = Depends(get_image_service),
):
    try:
        message = image_service.delete_image(current_user, image_id)
        return MessageResponse(message=message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Delete image error: {str(e)}", exc_info=True)
        raise APIException(status_code=500, detail="Server error while deleting image")

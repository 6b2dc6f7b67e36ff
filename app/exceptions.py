import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class APIException(HTTPException):
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)


class ValidationFailed(APIException):
    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)


class NotFound(APIException):
    def __init__(self, detail: str):
        super().__init__(status_code=404, detail=detail)


class Conflict(APIException):
    def __init__(self, detail: str = "Image with this name already exists in the folder"):
        super().__init__(status_code=400, detail=detail)


class FileTypeError(APIException):
    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)


class SizeLimitError(APIException):
    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)


class UploadFailed(APIException):
    def __init__(self, detail: str = "Failed to upload image to cloud storage"):
        super().__init__(status_code=500, detail=detail)


class StorageError(Exception):
    """Raised by object storage adapters when the backend call fails."""


def create_error_response(error_message: str) -> dict:
    """Create a standardized error response"""
    return {"message": error_message}


def join_error_messages(errors) -> str:
    """Flatten pydantic error entries into a single comma separated message."""
    return ", ".join(str(err.get("msg", err)) for err in errors)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    # HTTPBearer answers 403 when the header is missing
    if exc.status_code == 403 and "Not authenticated" in str(exc.detail):
        return JSONResponse(
            status_code=401,
            content=create_error_response("No token, authorization denied"),
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Request validation failed on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content=create_error_response(join_error_messages(exc.errors())),
    )

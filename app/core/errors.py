import logging

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

RESOURCE_NAMES = {
    "categories": "category",
    "expenses": "expense",
}


class StoreError(Exception):
    """Base class for storage failures."""


class CategoryNotFoundError(StoreError):
    """An expense referenced a category id that does not exist."""

    def __init__(self, category_id: int):
        super().__init__(f"Category {category_id} not found")
        self.category_id = category_id


def _resource_for(path: str) -> str:
    for segment in path.strip("/").split("/"):
        if segment in RESOURCE_NAMES:
            return RESOURCE_NAMES[segment]
    return "request"


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema violations are client errors: 400 with the structured field errors."""
    resource = _resource_for(request.url.path)
    logger.warning(f"Invalid {resource} data on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": f"Invalid {resource} data",
            "errors": jsonable_encoder(exc.errors()),
        },
    )

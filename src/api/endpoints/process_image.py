import structlog
from fastapi import APIRouter, Depends

from src.config import settings
from src.core.exceptions import AppError, InvalidImageError
from src.schemas.process_image import ProcessImageRequest, ProcessImageResponse
from src.services import data_url
from src.services.studio import BackgroundStudio, build_studio

logger = structlog.get_logger()

router = APIRouter()


def get_studio() -> BackgroundStudio:
    return build_studio(settings)


@router.post("/process-image", response_model=ProcessImageResponse)
async def process_image(
    body: ProcessImageRequest,
    studio: BackgroundStudio = Depends(get_studio),
) -> ProcessImageResponse:
    if not body.image_data_url:
        raise AppError(status_code=400, detail="Image data is required")

    try:
        payload = data_url.decode_data_url(body.image_data_url)
    except data_url.DataUrlError as e:
        logger.info("invalid_image_data", error=str(e))
        raise InvalidImageError("Invalid image data") from e

    result = await studio.transform(payload)
    return ProcessImageResponse(image_url=result.image_url)

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from src.config import Settings
from src.core.exceptions import (
    AllEndpointsFailedError,
    ConfigurationError,
    InvalidImageError,
    NoUsableResponseError,
    TransportError,
    UnrecognizedResponseError,
)
from src.services.backends import ImageTransformBackend, build_backends, get_http_client
from src.services.data_url import ImagePayload, encode_data_url

logger = structlog.get_logger()

MISSING_CREDENTIAL_MESSAGE = "FAL_API_KEY is not configured. Please add it to your .env file"


@dataclass(frozen=True)
class TransformResult:
    image_url: str
    endpoint: str


class BackgroundStudio:
    """Places a product photo on a studio background via a fallback chain.

    Backends are tried one at a time in priority order. The first one that
    yields a recognized image URL wins. A backend that answers 2xx with an
    unrecognized body is skipped without replacing the last hard failure, so
    a run that only ever saw such bodies ends in NoUsableResponseError.
    """

    def __init__(self, backends: Sequence[ImageTransformBackend], credential: str | None) -> None:
        self._backends = list(backends)
        self._credential = credential

    async def transform(self, image: ImagePayload) -> TransformResult:
        if not self._credential:
            raise ConfigurationError(MISSING_CREDENTIAL_MESSAGE)
        if not image.data:
            raise InvalidImageError("Invalid image data")

        data_url = encode_data_url(image)
        last_failure: TransportError | None = None

        for backend in self._backends:
            try:
                image_url = await backend.attempt(image, data_url, self._credential)
            except TransportError as e:
                logger.warning("endpoint_attempt_failed", endpoint=backend.name, error=e.message)
                last_failure = e
                continue
            except UnrecognizedResponseError:
                logger.warning("endpoint_response_unrecognized", endpoint=backend.name)
                continue

            logger.info("image_transformed", endpoint=backend.name)
            return TransformResult(image_url=image_url, endpoint=backend.name)

        if last_failure is not None:
            logger.error("all_endpoints_failed", endpoints=len(self._backends), error=last_failure.message)
            raise AllEndpointsFailedError(last_failure.message)

        logger.error("no_usable_response", endpoints=len(self._backends))
        raise NoUsableResponseError()


def build_studio(config: Settings) -> BackgroundStudio:
    backends = build_backends(config.fal_endpoints, config.generation, get_http_client(config.fal_timeout))
    return BackgroundStudio(backends, credential=config.fal_api_key)

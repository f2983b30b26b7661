from abc import ABC, abstractmethod
from typing import Any, Protocol

import httpx
import structlog

from src.config import EndpointDescriptor, GenerationParameters, settings
from src.core.exceptions import TransportError, UnrecognizedResponseError
from src.services.data_url import ImagePayload
from src.services.normalization import extract_error_message, extract_image_url

logger = structlog.get_logger()

_client: httpx.AsyncClient | None = None


def get_http_client(timeout: float | None = None) -> httpx.AsyncClient:
    global _client
    if _client is None:
        _client = httpx.AsyncClient(timeout=settings.fal_timeout if timeout is None else timeout)
    return _client


async def close_client() -> None:
    global _client
    if _client:
        await _client.aclose()
        _client = None


class ImageTransformBackend(Protocol):
    name: str

    async def attempt(self, image: ImagePayload, data_url: str, credential: str) -> str:
        """Return the generated image URL or raise.

        Raises TransportError when the endpoint is unavailable or reports an
        error, UnrecognizedResponseError when it answers 2xx with a body no
        shape matcher accepts.
        """
        ...


def _error_message(response: httpx.Response, url: str) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("detail", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return f"Endpoint {url} failed: {response.reason_phrase}"


class FalEndpointBackend(ABC):
    def __init__(self, url: str, parameters: GenerationParameters, client: httpx.AsyncClient) -> None:
        self.url = url
        self.name = url
        self._parameters = parameters
        self._client = client

    @abstractmethod
    def _request_kwargs(self, image: ImagePayload, data_url: str) -> dict[str, Any]:
        ...

    async def attempt(self, image: ImagePayload, data_url: str, credential: str) -> str:
        logger.debug("endpoint_attempt_started", endpoint=self.url)
        # InvalidURL comes from a bad configured URL, UnicodeEncodeError from a non-ASCII key.
        try:
            response = await self._client.post(
                self.url,
                headers={"Authorization": f"Key {credential}"},
                **self._request_kwargs(image, data_url),
            )
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
            raise TransportError(str(e) or type(e).__name__, endpoint=self.url) from e

        if not response.is_success:
            raise TransportError(_error_message(response, self.url), endpoint=self.url)

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(f"Endpoint {self.url} returned an invalid JSON body", endpoint=self.url) from e

        image_url = extract_image_url(body)
        if image_url is not None:
            return image_url

        error = extract_error_message(body)
        if error is not None:
            raise TransportError(error, endpoint=self.url)
        raise UnrecognizedResponseError(self.url)


class JsonEndpointBackend(FalEndpointBackend):
    def _request_kwargs(self, image: ImagePayload, data_url: str) -> dict[str, Any]:
        return {"json": {"image_url": data_url, **self._parameters.model_dump()}}


class MultipartEndpointBackend(FalEndpointBackend):
    def _request_kwargs(self, image: ImagePayload, data_url: str) -> dict[str, Any]:
        fields = {key: str(value) for key, value in self._parameters.model_dump().items()}
        return {
            "data": fields,
            "files": {"image_file": (f"product.{image.extension}", image.data, image.mime_type)},
        }


_BACKEND_TYPES: dict[str, type[FalEndpointBackend]] = {
    "json": JsonEndpointBackend,
    "multipart": MultipartEndpointBackend,
}


def build_backends(
    endpoints: list[EndpointDescriptor],
    parameters: GenerationParameters,
    client: httpx.AsyncClient,
) -> list[FalEndpointBackend]:
    return [_BACKEND_TYPES[endpoint.body](endpoint.url, parameters, client) for endpoint in endpoints]

"""Map the response shapes fal.ai endpoints return onto a single image URL.

Known shapes, tried in order:

- ``{"images": [{"url": ...}, ...]}`` or ``{"images": ["https://...", ...]}``
- ``{"image": {"url": ...}}``
- ``{"url": ...}``
"""

from collections.abc import Callable
from typing import Any

ShapeMatcher = Callable[[dict[str, Any]], str | None]


def _non_empty_str(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _url_of(value: Any) -> str | None:
    if isinstance(value, dict):
        return _non_empty_str(value.get("url"))
    return None


def match_image_list(body: dict[str, Any]) -> str | None:
    images = body.get("images")
    if not isinstance(images, list) or not images:
        return None
    first = images[0]
    return _url_of(first) or _non_empty_str(first)


def match_image_object(body: dict[str, Any]) -> str | None:
    return _url_of(body.get("image"))


def match_url_field(body: dict[str, Any]) -> str | None:
    return _non_empty_str(body.get("url"))


SHAPE_MATCHERS: tuple[ShapeMatcher, ...] = (
    match_image_list,
    match_image_object,
    match_url_field,
)


def extract_image_url(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    for matcher in SHAPE_MATCHERS:
        url = matcher(body)
        if url is not None:
            return url
    return None


def extract_error_message(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    return _non_empty_str(body.get("error"))

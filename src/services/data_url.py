import base64
import binascii
from dataclasses import dataclass
from urllib.parse import unquote_to_bytes

DEFAULT_MEDIA_TYPE = "image/jpeg"

FORMAT_TO_EXT = {
    "jpeg": "jpg",
    "png": "png",
    "gif": "gif",
    "webp": "webp",
}

FORMAT_TO_MEDIA_TYPE = {
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}

MEDIA_TYPE_TO_EXT = {media_type: FORMAT_TO_EXT.get(fmt, fmt) for fmt, media_type in FORMAT_TO_MEDIA_TYPE.items()}


class DataUrlError(ValueError):
    pass


@dataclass(frozen=True)
class ImagePayload:
    data: bytes
    mime_type: str

    @property
    def extension(self) -> str:
        return MEDIA_TYPE_TO_EXT.get(self.mime_type, "jpg")


def detect_mime_type(image_bytes: bytes) -> str:
    fmt = _detect_image_format(image_bytes)
    if fmt is None:
        return DEFAULT_MEDIA_TYPE
    return FORMAT_TO_MEDIA_TYPE[fmt]


def _detect_image_format(image_bytes: bytes) -> str | None:
    if image_bytes[:8] == b"\x89PNG\r\n\x1a\n":
        return "png"
    if image_bytes[:2] == b"\xff\xd8":
        return "jpeg"
    if image_bytes[:6] in (b"GIF87a", b"GIF89a"):
        return "gif"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "webp"
    return None


def decode_data_url(data_url: str) -> ImagePayload:
    """Decode a ``data:`` URL as produced by the browser's FileReader.

    A missing or generic media type is replaced by one sniffed from the
    payload's magic bytes. Anything declared as a non-image type is rejected.
    """
    if not data_url.startswith("data:") or "," not in data_url:
        raise DataUrlError("Not a data URL")

    header, _, encoded = data_url[len("data:") :].partition(",")
    params = [p.strip() for p in header.split(";")]
    is_base64 = params[-1].lower() == "base64"
    if is_base64:
        params = params[:-1]
    media_type = params[0].lower() if params and params[0] else ""

    if is_base64:
        try:
            data = base64.b64decode(encoded.strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            raise DataUrlError(f"Invalid base64 payload: {e}") from e
    else:
        data = unquote_to_bytes(encoded)

    if not data:
        raise DataUrlError("Empty payload")

    if not media_type or media_type == "application/octet-stream":
        media_type = detect_mime_type(data)
    elif not media_type.startswith("image/"):
        raise DataUrlError(f"Unsupported media type: {media_type}")

    return ImagePayload(data=data, mime_type=media_type)


def encode_data_url(image: ImagePayload) -> str:
    encoded = base64.b64encode(image.data).decode()
    return f"data:{image.mime_type or DEFAULT_MEDIA_TYPE};base64,{encoded}"

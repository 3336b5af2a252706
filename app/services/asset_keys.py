"""Storage keys for uploaded assets: random URL-safe name, extension from media type, orientation prefix."""
import base64
import secrets

from app.services.aspect_ratio import ASPECT_16_9, ASPECT_9_16

VIDEO_MEDIA_TYPE = "video/mp4"
THUMBNAIL_MEDIA_TYPES = {"image/jpeg", "image/png"}

MEDIA_TYPE_EXTENSIONS = {
    "video/mp4": ".mp4",
    "image/jpeg": ".jpg",
    "image/png": ".png",
}

RANDOM_NAME_BYTES = 32

ORIENTATION_LANDSCAPE = "landscape"
ORIENTATION_PORTRAIT = "portrait"
ORIENTATION_OTHER = "other"


def parse_media_type(raw: str | None) -> str:
    """'video/mp4; codecs=avc1' -> 'video/mp4'. Empty string when missing."""
    return (raw or "").split(";")[0].strip().lower()


def media_type_to_ext(media_type: str) -> str:
    try:
        return MEDIA_TYPE_EXTENSIONS[media_type]
    except KeyError:
        raise ValueError(f"unsupported media type: {media_type!r}") from None


def get_asset_path(media_type: str) -> str:
    """Random leaf name such as 'q3X...Zk.mp4'. Uniqueness is probabilistic and never checked."""
    ext = media_type_to_ext(media_type)
    name = base64.urlsafe_b64encode(secrets.token_bytes(RANDOM_NAME_BYTES)).rstrip(b"=").decode("ascii")
    return f"{name}{ext}"


def orientation_for_aspect_ratio(aspect_ratio: str | None) -> str:
    if aspect_ratio == ASPECT_16_9:
        return ORIENTATION_LANDSCAPE
    if aspect_ratio == ASPECT_9_16:
        return ORIENTATION_PORTRAIT
    return ORIENTATION_OTHER


def build_object_key(media_type: str, aspect_ratio: str | None = None) -> str:
    """Object key for the store; prefixed with the orientation bucket when an aspect ratio is given."""
    leaf = get_asset_path(media_type)
    if aspect_ratio is None:
        return leaf
    return f"{orientation_for_aspect_ratio(aspect_ratio)}/{leaf}"

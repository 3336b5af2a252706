"""Thumbnail upload: JPEG/PNG written under the assets folder, served at /assets."""
import logging
from pathlib import Path

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import Settings
from app.models.user import User
from app.models.video import Video
from app.repositories.video_repository import VideoRepository
from app.services.asset_keys import THUMBNAIL_MEDIA_TYPES, get_asset_path, parse_media_type
from app.services.video_upload import MISSING_FILE_DETAIL, UploadTooLarge, copy_limited, get_owned_video

logger = logging.getLogger(__name__)


def assets_dir(settings: Settings) -> Path:
    if settings.assets_root:
        return Path(settings.assets_root)
    return Path(__file__).resolve().parent.parent.parent / "assets"


def assets_base_url(settings: Settings) -> str:
    return (settings.assets_base_url or f"http://localhost:{settings.port}").rstrip("/")


class ThumbnailUpload:
    def __init__(self, settings: Settings, repository: VideoRepository | None = None):
        self._settings = settings
        self._repo = repository or VideoRepository()

    def upload(self, db: Session, user: User, video_id: str, file: UploadFile | None) -> Video:
        video = get_owned_video(db, self._repo, video_id, user)
        if file is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=MISSING_FILE_DETAIL)

        media_type = parse_media_type(file.content_type)
        if not media_type:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing Content-Type for thumbnail")
        if media_type not in THUMBNAIL_MEDIA_TYPES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Thumbnail must be a JPEG or PNG image")

        folder = assets_dir(self._settings)
        folder.mkdir(parents=True, exist_ok=True)
        name = get_asset_path(media_type)
        path = folder / name
        self._write(file, path)

        video.thumbnail_url = f"{assets_base_url(self._settings)}/assets/{name}"
        try:
            return self._repo.update_video(db, video)
        except SQLAlchemyError:
            db.rollback()
            path.unlink(missing_ok=True)
            logger.exception("Saving thumbnail URL for %s failed", video.id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Couldn't update video",
            ) from None

    def _write(self, file: UploadFile, path: Path) -> None:
        max_bytes = self._settings.max_thumbnail_upload_bytes
        try:
            with path.open("wb") as f:
                copy_limited(file.file, f, max_bytes)
        except UploadTooLarge:
            path.unlink(missing_ok=True)
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Thumbnail must be at most {max_bytes} bytes",
            ) from None
        except OSError:
            path.unlink(missing_ok=True)
            logger.exception("Writing thumbnail %s failed", path)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error writing file",
            ) from None
        logger.info("Saved thumbnail %s", path)

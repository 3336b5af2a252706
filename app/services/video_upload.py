"""
Video upload pipeline: stage the request body, classify orientation (ffprobe),
remux for fast start (ffmpeg), put to the object store, verify with head, save the URL.

Every step is terminal on failure; nothing is retried. Both local temporary files
(staged upload and processed artifact) are removed on every exit path.
"""
import logging
import tempfile
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import Settings
from app.models.user import User
from app.models.video import Video
from app.repositories.video_repository import VideoRepository
from app.services.aspect_ratio import ASPECT_OTHER, FFprobeProber, ProbeError, Prober, get_video_aspect_ratio
from app.services.asset_keys import VIDEO_MEDIA_TYPE, build_object_key, parse_media_type
from app.services.ffmpeg_faststart import FFmpegFastStart, RemuxError, Remuxer
from app.services.object_store import ACL_PUBLIC_READ, ObjectStore, ObjectStoreError, public_object_url

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1 MB
STAGED_PREFIX = "tubely-upload-"
MISSING_FILE_DETAIL = "Unable to parse form file"


class UploadTooLarge(Exception):
    pass


def copy_limited(src: BinaryIO, dst: BinaryIO, max_bytes: int) -> int:
    """Copy src to dst in chunks; raise UploadTooLarge once more than max_bytes were read."""
    total = 0
    while chunk := src.read(CHUNK_SIZE):
        total += len(chunk)
        if total > max_bytes:
            raise UploadTooLarge(f"upload exceeds {max_bytes} bytes")
        dst.write(chunk)
    return total


def get_owned_video(db: Session, repository: VideoRepository, video_id: str, user: User) -> Video:
    """Load the target record and check that the caller owns it."""
    video = repository.get_video(db, video_id)
    if not video:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Couldn't get video")
    if video.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="You don't own this video")
    return video


@contextmanager
def staged_upload(source: BinaryIO, temp_dir: str | None, max_bytes: int) -> Iterator[BinaryIO]:
    """Stage source into a named temp file, rewound to the start. The file is deleted on exit."""
    with tempfile.NamedTemporaryFile(prefix=STAGED_PREFIX, suffix=".mp4", dir=temp_dir) as staged:
        try:
            size = copy_limited(source, staged, max_bytes)
        except UploadTooLarge:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Video must be at most {max_bytes} bytes",
            ) from None
        except OSError:
            logger.exception("Copying upload to %s failed", staged.name)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error copying data to upload file",
            ) from None
        staged.flush()
        staged.seek(0)
        logger.info("Staged %d bytes at %s", size, staged.name)
        yield staged


@contextmanager
def owned_file(path: Path) -> Iterator[Path]:
    """Delete path when the block exits, however it exits."""
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)


class VideoUploadPipeline:
    """Upload a video for an existing record owned by the caller; returns the updated record."""

    def __init__(
        self,
        settings: Settings,
        store: ObjectStore,
        repository: VideoRepository | None = None,
        prober: Prober | None = None,
        remuxer: Remuxer | None = None,
    ):
        self._settings = settings
        self._store = store
        self._repo = repository or VideoRepository()
        self._prober = prober or FFprobeProber(settings)
        self._remuxer = remuxer or FFmpegFastStart(settings)

    def upload(self, db: Session, user: User, video_id: str, file: UploadFile | None) -> Video:
        video = get_owned_video(db, self._repo, video_id, user)
        if file is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=MISSING_FILE_DETAIL)

        media_type = parse_media_type(file.content_type)
        if media_type != VIDEO_MEDIA_TYPE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Video must be {VIDEO_MEDIA_TYPE}",
            )

        temp_dir = self._settings.upload_temp_dir or None
        with ExitStack() as stack:
            staged = stack.enter_context(
                staged_upload(file.file, temp_dir, self._settings.max_video_upload_bytes)
            )
            staged_path = Path(staged.name)

            aspect_ratio = self._classify(staged_path)

            try:
                processed_path = self._remuxer.remux(staged_path)
            except RemuxError:
                logger.exception("Processing video %s failed", video.id)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Error processing video",
                ) from None
            stack.enter_context(owned_file(processed_path))

            key = build_object_key(media_type, aspect_ratio)
            self._put_and_verify(processed_path, key, media_type)

            return self._save_url(db, video, key)

    def _classify(self, path: Path) -> str:
        # Best-effort: orientation only affects the key prefix, so a probe failure does not abort.
        try:
            return get_video_aspect_ratio(path, self._prober)
        except ProbeError as e:
            logger.warning("Aspect ratio detection failed for %s, using %r: %s", path, ASPECT_OTHER, e)
            return ASPECT_OTHER

    def _put_and_verify(self, path: Path, key: str, media_type: str) -> None:
        bucket = self._settings.s3_bucket
        try:
            with path.open("rb") as body:
                self._store.put_object(bucket, key, body, media_type, ACL_PUBLIC_READ)
        except (ObjectStoreError, OSError):
            logger.exception("Uploading %s to bucket %s failed", key, bucket)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error uploading video",
            ) from None

        try:
            self._store.head_object(bucket, key)
        except ObjectStoreError:
            logger.exception("Verifying %s in bucket %s failed", key, bucket)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error verifying video upload",
            ) from None

    def _save_url(self, db: Session, video: Video, key: str) -> Video:
        video.video_url = public_object_url(self._settings, key)
        try:
            return self._repo.update_video(db, video)
        except SQLAlchemyError:
            db.rollback()
            # No compensating delete: the object stays in the bucket unreferenced.
            logger.exception("Saving video URL for %s failed; object %s is orphaned", video.id, key)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error updating video",
            ) from None


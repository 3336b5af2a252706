"""
File uploads for a video record owned by the caller.
- Video: staged, classified by aspect ratio, remuxed for fast start and pushed to S3; the public URL is saved.
- Thumbnail: JPEG/PNG written under the assets folder, served at /assets.
"""
from functools import lru_cache
from fastapi import APIRouter, Depends, UploadFile, File
from sqlalchemy.orm import Session
from app.auth import get_current_user
from app.config import get_settings
from app.database import get_db
from app.models.user import User
from app.routers.videos import parse_video_id
from app.schemas.video import VideoResponse, VideoUploadResponse
from app.services.object_store import S3ObjectStore
from app.services.thumbnail_upload import ThumbnailUpload
from app.services.video_upload import VideoUploadPipeline

router = APIRouter(prefix="/api", tags=["uploads"])


@lru_cache
def get_object_store() -> S3ObjectStore:
    """One boto3 client per process."""
    return S3ObjectStore(get_settings())


def get_video_upload_pipeline(store: S3ObjectStore = Depends(get_object_store)) -> VideoUploadPipeline:
    return VideoUploadPipeline(get_settings(), store)


def get_thumbnail_upload() -> ThumbnailUpload:
    return ThumbnailUpload(get_settings())


@router.post("/video_upload/{video_id}", response_model=VideoUploadResponse)
def upload_video(
    video_id: str = Depends(parse_video_id),
    video: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    pipeline: VideoUploadPipeline = Depends(get_video_upload_pipeline),
):
    """Upload an MP4 for the video record. Returns the public video URL."""
    record = pipeline.upload(db, user, video_id, video)
    return VideoUploadResponse(video_url=record.video_url)


@router.post("/thumbnail_upload/{video_id}", response_model=VideoResponse)
def upload_thumbnail(
    video_id: str = Depends(parse_video_id),
    thumbnail: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    uploader: ThumbnailUpload = Depends(get_thumbnail_upload),
):
    """Upload a JPEG or PNG thumbnail for the video record."""
    return uploader.upload(db, user, video_id, thumbnail)

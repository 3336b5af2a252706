"""Video records: create a draft, list mine, read one. Files are attached via the upload endpoints."""
import uuid
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.auth import get_current_user
from app.database import get_db
from app.models.user import User
from app.repositories.video_repository import VideoRepository
from app.schemas.video import VideoCreate, VideoResponse

router = APIRouter(prefix="/api/videos", tags=["videos"])


def parse_video_id(video_id: str) -> str:
    """Path dependency: normalized UUID string, 400 if malformed. Listed before auth so a bad id is a 400 first."""
    try:
        return str(uuid.UUID(video_id))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid ID") from None


@router.post("", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
def create_video(
    body: VideoCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    title = body.title.strip()
    if not title:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")
    return VideoRepository.create_video(db, user.id, title, (body.description or "").strip() or None)


@router.get("", response_model=list[VideoResponse])
def list_videos(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the caller's videos, newest first."""
    return VideoRepository.list_videos_for_user(db, user.id)


@router.get("/{video_id}", response_model=VideoResponse)
def get_video(
    video_id: str = Depends(parse_video_id),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    video = VideoRepository.get_video(db, video_id)
    if not video:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Couldn't get video")
    if video.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="You don't own this video")
    return video

"""
Video record persistence. DB is the source of truth; records are mutated in place.
All operations are sync (used from sync endpoints).
"""
from sqlalchemy.orm import Session

from app.models.video import Video


def get_video(db: Session, video_id: str) -> Video | None:
    return db.query(Video).filter(Video.id == video_id).first()


def create_video(db: Session, user_id: str, title: str, description: str | None = None) -> Video:
    video = Video(user_id=user_id, title=title, description=description)
    db.add(video)
    db.commit()
    db.refresh(video)
    return video


def update_video(db: Session, video: Video) -> Video:
    """Persist in-place changes to a video. Caller rolls back on failure."""
    db.add(video)
    db.commit()
    db.refresh(video)
    return video


def list_videos_for_user(db: Session, user_id: str) -> list[Video]:
    return (
        db.query(Video)
        .filter(Video.user_id == user_id)
        .order_by(Video.created_at.desc())
        .all()
    )


class VideoRepository:
    """Thin wrapper for dependency injection; delegates to module functions."""

    @staticmethod
    def get_video(db: Session, video_id: str) -> Video | None:
        return get_video(db, video_id)

    @staticmethod
    def create_video(db: Session, user_id: str, title: str, description: str | None = None) -> Video:
        return create_video(db, user_id, title, description)

    @staticmethod
    def update_video(db: Session, video: Video) -> Video:
        return update_video(db, video)

    @staticmethod
    def list_videos_for_user(db: Session, user_id: str) -> list[Video]:
        return list_videos_for_user(db, user_id)

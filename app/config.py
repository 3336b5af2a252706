from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./tubely.db"

    # JWT
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Frontend URL for CORS
    frontend_url: str = "http://localhost:3000"

    # Port the API is served on; used for local asset URLs
    port: int = 8091

    # S3 / S3-compatible object storage
    s3_bucket: str = "tubely-videos"
    s3_region: str = "us-east-1"
    s3_endpoint_url: str = ""  # e.g. http://localhost:9000 for MinIO; empty = AWS
    aws_access_key_id: str = ""  # empty = default boto3 credential chain
    aws_secret_access_key: str = ""
    public_base_url: str = ""  # e.g. CDN domain; empty = bucket virtual-host URL

    # Thumbnails: local folder served at /assets (empty = backend/assets)
    assets_root: str = ""
    assets_base_url: str = ""  # empty = http://localhost:{port}

    # Video staging folder for temporary files (empty = system temp dir)
    upload_temp_dir: str = ""

    # Upload size caps (bytes)
    max_video_upload_bytes: int = 1 << 30  # 1 GiB
    max_thumbnail_upload_bytes: int = 10 << 20  # 10 MiB

    # FFmpeg tooling
    ffprobe_bin: str = "ffprobe"
    ffmpeg_bin: str = "ffmpeg"
    ffprobe_timeout_seconds: int = 60
    ffmpeg_timeout_seconds: int = 600

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()

import os
import tempfile

# Read by get_settings() when app modules are first imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ASSETS_ROOT", tempfile.mkdtemp(prefix="tubely-assets-"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.auth import create_access_token  # noqa: E402
from app.config import Settings  # noqa: E402
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import User, Video  # noqa: E402
from app.routers.uploads import get_thumbnail_upload, get_video_upload_pipeline  # noqa: E402
from app.services.thumbnail_upload import ThumbnailUpload  # noqa: E402
from app.services.video_upload import VideoUploadPipeline  # noqa: E402
from tests.fakes import FakeProber, FakeRemuxer, InMemoryObjectStore  # noqa: E402


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def staging_dir(tmp_path):
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def settings(tmp_path, staging_dir):
    return Settings(
        s3_bucket="tubely-test",
        s3_region="us-west-2",
        upload_temp_dir=str(staging_dir),
        assets_root=str(tmp_path / "assets"),
        port=8091,
    )


@pytest.fixture
def prober():
    return FakeProber()


@pytest.fixture
def remuxer():
    return FakeRemuxer()


@pytest.fixture
def store():
    return InMemoryObjectStore()


@pytest.fixture
def pipeline_factory(settings, store, prober, remuxer):
    """Builds the pipeline the app uses; tests may swap collaborators before the request."""
    overrides = {"settings": settings, "store": store, "prober": prober, "remuxer": remuxer, "repository": None}

    def build():
        return VideoUploadPipeline(
            overrides["settings"],
            overrides["store"],
            repository=overrides["repository"],
            prober=overrides["prober"],
            remuxer=overrides["remuxer"],
        )

    build.overrides = overrides
    return build


@pytest.fixture
def client(db_session, settings, pipeline_factory):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_video_upload_pipeline] = pipeline_factory
    app.dependency_overrides[get_thumbnail_upload] = lambda: ThumbnailUpload(settings)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _make_user(db, email):
    user = User(email=email, password=None)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def owner(db_session):
    return _make_user(db_session, "owner@example.com")


@pytest.fixture
def other_user(db_session):
    return _make_user(db_session, "other@example.com")


@pytest.fixture
def video(db_session, owner):
    v = Video(user_id=owner.id, title="Boot.dev launch", description="2 second clip")
    db_session.add(v)
    db_session.commit()
    db_session.refresh(v)
    return v


@pytest.fixture
def auth_headers():
    def make(user) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}

    return make

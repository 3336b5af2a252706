import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from app.config import get_settings
from app.database import init_db
from app.middleware import UploadSizeLimitMiddleware
from app.routers import auth, uploads, videos
from app.services.thumbnail_upload import assets_dir

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.database_url.startswith("sqlite"):
        init_db()
        logger.info("SQLite tables ready at %s", settings.database_url)
    yield


app = FastAPI(title="Tubely API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(UploadSizeLimitMiddleware, settings=settings)

app.include_router(auth.router)
app.include_router(videos.router)
app.include_router(uploads.router)

# StaticFiles checks the folder when mounted
_assets = assets_dir(settings)
_assets.mkdir(parents=True, exist_ok=True)
app.mount("/assets", StaticFiles(directory=_assets), name="assets")


@app.get("/")
def root():
    return {"message": "Tubely API", "docs": "/docs"}

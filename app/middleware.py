import logging
from fastapi import HTTPException
from fastapi.responses import JSONResponse
from app.config import Settings

logger = logging.getLogger(__name__)

TOO_LARGE_DETAIL = "File too large"


class UploadSizeLimitMiddleware:
    """
    Caps request bodies on the upload routes before the multipart form is parsed.

    A declared Content-Length over the cap is rejected without reading the body. Bodies
    without one (chunked) are counted as they stream and cut off once they pass the cap.
    The limits are read per request so a changed Settings object takes effect at once.
    """

    def __init__(self, app, settings: Settings):
        self.app = app
        self.settings = settings

    def limit_for(self, path: str):
        if path.startswith("/api/video_upload/"):
            return self.settings.max_video_upload_bytes
        if path.startswith("/api/thumbnail_upload/"):
            return self.settings.max_thumbnail_upload_bytes
        return None

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit = self.limit_for(scope["path"])
        if limit is None:
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers") or [])
        content_length = headers.get(b"content-length")
        if content_length:
            try:
                declared = int(content_length)
            except ValueError:
                declared = None
            if declared is not None and declared > limit:
                logger.warning("Rejected %s: declared %s bytes, limit %s", scope["path"], declared, limit)
                response = JSONResponse({"detail": TOO_LARGE_DETAIL}, status_code=413)
                await response(scope, receive, send)
                return

        received = 0

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    logger.warning("Rejected %s: body passed limit %s while streaming", scope["path"], limit)
                    raise HTTPException(status_code=413, detail=TOO_LARGE_DETAIL)
            return message

        await self.app(scope, limited_receive, send)

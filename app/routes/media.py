"""
Media Lookup Routes

Page metadata previews, direct video URL extraction, and a download proxy
for media hosts that do not send CORS headers.
"""

import logging
from typing import Optional
import requests
from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse

from core.config import Config
from core.page_extractor import extract_page_metadata, extract_social_video_url

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/extract")
def extract_video_url(url: Optional[str] = None):
    """Find the direct video URL behind a social media post"""
    if not url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="URL is required")

    return extract_social_video_url(url)


@router.get("/metadata")
def get_metadata(url: Optional[str] = None):
    """Return the title, description, and preview image of a page"""
    if not url:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "URL is required"})

    try:
        return extract_page_metadata(url)
    except Exception as e:
        logger.error(f"❌ Metadata fetch error: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": f"Failed to fetch metadata: {e}"}
        )


@router.get("/proxy-download")
def proxy_download(url: Optional[str] = None):
    """Stream a remote file through the backend, keeping its content type"""
    if not url:
        return PlainTextResponse("Missing URL parameter", status_code=status.HTTP_400_BAD_REQUEST)

    try:
        response = requests.get(url, stream=True, timeout=Config.DEFAULT_TIMEOUT)
        if not response.ok:
            response.close()
            raise requests.HTTPError(f"Failed to fetch source: {response.status_code}")
    except Exception as e:
        logger.error(f"❌ Proxy download error: {e}")
        return PlainTextResponse("Failed to download file", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    content_type = response.headers.get('content-type') or 'application/octet-stream'

    def iter_body():
        try:
            for chunk in response.iter_content(chunk_size=Config.DOWNLOAD_CHUNK_SIZE):
                if chunk:
                    yield chunk
        finally:
            response.close()

    return StreamingResponse(iter_body(), media_type=content_type)

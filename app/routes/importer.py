"""
Video Import Routes

Endpoints for importing social media videos into the library.
"""

import asyncio
import json
import logging
import time
from typing import Optional
from fastapi import APIRouter, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from sse_starlette.sse import EventSourceResponse

from app.services.video_importer import SocialVideoImporter

logger = logging.getLogger(__name__)

router = APIRouter()

TERMINAL_EVENTS = ("completed", "error")


class ImportVideoRequest(BaseModel):
    """Request model for importing a video"""
    url: str
    save: bool = True
    folder_id: Optional[str] = None


class ImportVideoResponse(BaseModel):
    """Response model for a video import"""
    success: bool
    video_id: Optional[str] = None
    video: Optional[dict] = None
    strategy: Optional[str] = None
    error: Optional[str] = None


def get_importer() -> SocialVideoImporter:
    return SocialVideoImporter()


def _require_url(url: Optional[str]) -> str:
    if not url or not url.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="URL is required"
        )
    return url.strip()


@router.post("/import", response_model=ImportVideoResponse, response_model_exclude_none=True)
async def import_video(request: ImportVideoRequest):
    """
    Download a social video, upload it to storage, and save a draft record

    Pipeline failures are reported in the body (success=false) rather than
    as HTTP errors, so the admin UI can show the message as-is.
    """
    url = _require_url(request.url)
    logger.info(f"📥 Import requested: {url}")

    importer = get_importer()
    result = await run_in_threadpool(
        importer.import_video,
        url,
        save_to_store=request.save,
        folder_id=request.folder_id
    )
    return result.to_dict()


@router.get("/import/stream")
async def import_video_stream(url: str, save: bool = True, folder_id: Optional[str] = None):
    """
    Import a video and stream progress as Server-Sent Events

    The pipeline runs in a worker thread and pushes events into a queue
    that the generator drains. The stream ends with a `completed` or
    `error` event carrying the import result.
    """
    url = _require_url(url)
    logger.info(f"📡 Starting SSE import for: {url}")

    async def import_and_stream():
        loop = asyncio.get_running_loop()
        event_queue: asyncio.Queue = asyncio.Queue()
        start_time = time.time()

        def elapsed():
            return int(time.time() - start_time)

        def progress(event_type: str, data: dict):
            if event_type in TERMINAL_EVENTS:
                # Sent below with the full result once the worker returns
                return
            loop.call_soon_threadsafe(
                event_queue.put_nowait,
                {"event": event_type, "data": {**data, "elapsed": elapsed()}}
            )

        yield {
            "event": "ping",
            "data": json.dumps({"message": "SSE connection established", "elapsed": elapsed()})
        }
        await asyncio.sleep(0)

        importer = get_importer()
        task = loop.run_in_executor(
            None,
            lambda: importer.import_video(url, save_to_store=save, folder_id=folder_id, progress=progress)
        )
        # Sentinel is queued after every progress event the worker already scheduled
        task.add_done_callback(lambda _: loop.call_soon_threadsafe(event_queue.put_nowait, None))

        while True:
            event = await event_queue.get()
            if event is None:
                break
            yield {
                "event": event["event"],
                "data": json.dumps(event["data"])
            }
            await asyncio.sleep(0)

        result = await task
        yield {
            "event": "completed" if result.success else "error",
            "data": json.dumps({**result.to_dict(), "elapsed": elapsed()})
        }

    return EventSourceResponse(import_and_stream())

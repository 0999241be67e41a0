"""
Admin Maintenance Routes
"""

import logging
from fastapi import APIRouter, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from app.services.social_migration import migrate_social_videos
from core.video_store import VideoStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/migrate-social")
async def migrate_social(dry_run: bool = False):
    """Move every imported social video into the Instagram folder"""
    try:
        store = VideoStore()
        return await run_in_threadpool(migrate_social_videos, store, dry_run=dry_run)
    except Exception as e:
        logger.error(f"❌ Migration failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": str(e)}
        )

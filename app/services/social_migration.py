"""
Social Video Migration

Moves every imported social video into the shared "Instagram" folder,
creating the folder if it does not exist yet.
"""

import logging
from typing import Dict, List

from core.config import Config
from core.video_store import VideoStore

logger = logging.getLogger(__name__)


def is_social_video(doc: Dict) -> bool:
    """
    Check whether a video record came from a social media import

    A record counts as social if it has an original URL, is typed 'social',
    or its uploader URL points at Instagram or TikTok.
    """
    if doc.get('original_url'):
        return True
    if doc.get('type') == 'social':
        return True
    uploader_url = doc.get('uploader_url') or ''
    return any(host in uploader_url for host in Config.SOCIAL_UPLOADER_HOSTS)


def is_unsorted(doc: Dict) -> bool:
    folder_id = doc.get('folder_id')
    return not folder_id or folder_id == 'null'


def migrate_social_videos(store: VideoStore, dry_run: bool = False) -> Dict:
    """
    Move all social videos into the social folder

    Args:
        store: Library store
        dry_run: If True, report what would move without updating anything

    Returns:
        Dict with success, message, moved, folder_id, and a per-video report
    """
    folder_id = store.find_or_create_folder(Config.SOCIAL_FOLDER_NAME)

    logger.info("🔎 Finding social videos to move...")
    report: List[Dict] = []
    to_move: List[str] = []

    for doc in store.list_videos():
        if not is_social_video(doc):
            continue

        report.append({
            'id': doc.get('id'),
            'title': doc.get('title'),
            'folder_id': doc.get('folder_id'),
            'is_unsorted': is_unsorted(doc),
            'original_url': doc.get('original_url'),
            'type': doc.get('type'),
        })

        # All social videos go to the folder, not just unsorted ones
        if str(doc.get('folder_id')) != folder_id:
            logger.debug(f"   Moving video: {doc.get('title') or doc.get('id')}")
            to_move.append(doc['id'])

    if not to_move:
        return {
            'success': True,
            'message': 'No videos needed moving.',
            'moved': 0,
            'folder_id': folder_id,
            'report': report,
        }

    if dry_run:
        return {
            'success': True,
            'message': f"Would move {len(to_move)} videos to {Config.SOCIAL_FOLDER_NAME} folder.",
            'moved': 0,
            'folder_id': folder_id,
            'report': report,
        }

    moved = store.move_videos(to_move, folder_id)
    return {
        'success': True,
        'message': f"Moved {moved} videos to {Config.SOCIAL_FOLDER_NAME} folder.",
        'moved': moved,
        'folder_id': folder_id,
        'report': report,
    }

"""
Video Library Store

Thin CRUD helpers over the Supabase `videos` and `folders` tables.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from supabase import create_client, Client

from core.config import Config

logger = logging.getLogger(__name__)


class VideoStore:
    """Read and write library records in Supabase"""

    def __init__(self, client: Optional[Client] = None):
        if client is None:
            supabase_url, supabase_key = Config.get_supabase_credentials()

            if not supabase_url or not supabase_key:
                raise ValueError("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY environment variables")

            client = create_client(supabase_url, supabase_key)

        self.supabase: Client = client
        tables = Config.get_table_names()
        self.videos_table = tables['videos']
        self.folders_table = tables['folders']

    def add_video(self, record: Dict) -> str:
        """
        Insert a video record

        Returns:
            The new record's id

        Raises:
            RuntimeError: If the insert returned no row
        """
        result = self.supabase.table(self.videos_table).insert(record).execute()
        if not result.data:
            raise RuntimeError("Insert into videos returned no data")

        video_id = str(result.data[0]['id'])
        logger.info(f"✅ Saved video record: {video_id}")
        return video_id

    def get_video(self, video_id: str) -> Optional[Dict]:
        result = self.supabase.table(self.videos_table).select('*').eq('id', video_id).limit(1).execute()
        return result.data[0] if result.data else None

    def list_videos(self) -> List[Dict]:
        result = self.supabase.table(self.videos_table).select('*').execute()
        return result.data or []

    def list_folders(self) -> List[Dict]:
        result = self.supabase.table(self.folders_table).select('*').execute()
        return result.data or []

    def create_folder(self, name: str) -> str:
        result = self.supabase.table(self.folders_table).insert({
            'name': name,
            'created_at': datetime.now(timezone.utc).isoformat(),
        }).execute()
        if not result.data:
            raise RuntimeError(f"Insert into folders returned no data for '{name}'")

        folder_id = str(result.data[0]['id'])
        logger.info(f"📁 Created folder {name} (ID: {folder_id})")
        return folder_id

    def find_folder(self, name: str) -> Optional[str]:
        """
        Find a folder whose name contains `name` (case-insensitive)

        When several match, the last one listed wins.
        """
        needle = name.lower()
        found = None
        for folder in self.list_folders():
            folder_name = folder.get('name') or ''
            if needle in folder_name.lower():
                found = str(folder['id'])
                logger.info(f"📁 Found folder: {folder_name} (ID: {found})")
        return found

    def find_or_create_folder(self, name: str) -> str:
        folder_id = self.find_folder(name)
        if folder_id:
            return folder_id

        logger.info(f"📁 Folder {name} not found. Creating one...")
        return self.create_folder(name)

    def move_videos(self, video_ids: List[str], folder_id: str) -> int:
        """
        Move videos into a folder with a single batched update

        Returns:
            Number of videos moved
        """
        if not video_ids:
            return 0

        self.supabase.table(self.videos_table).update({
            'folder_id': folder_id,
            'updated_at': datetime.now(timezone.utc).isoformat(),
        }).in_('id', video_ids).execute()

        logger.info(f"📦 Moved {len(video_ids)} videos to folder {folder_id}")
        return len(video_ids)

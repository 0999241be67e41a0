"""
Supabase Storage Manager

Handles uploading imported videos to Supabase storage and issuing
signed read URLs for playback.
"""

import logging
import mimetypes
from typing import Dict, Optional, Tuple
from pathlib import Path
from supabase import create_client, Client

from core.config import Config

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a storage operation the caller depends on fails"""


VIDEO_CONTENT_TYPES = {
    '.mp4': 'video/mp4',
    '.m4v': 'video/mp4',
    '.webm': 'video/webm',
    '.mov': 'video/quicktime',
    '.mkv': 'video/x-matroska',
}


def content_type_for(file_path: str) -> str:
    """
    Pick a MIME type for a downloaded video file

    Examples:
        >>> content_type_for('/tmp/abc.webm')
        'video/webm'
        >>> content_type_for('/tmp/abc')
        'video/mp4'
    """
    ext = Path(file_path).suffix.lower()
    if ext in VIDEO_CONTENT_TYPES:
        return VIDEO_CONTENT_TYPES[ext]
    guessed, _ = mimetypes.guess_type(file_path)
    if guessed and guessed.startswith('video/'):
        return guessed
    return 'video/mp4'


class StorageManager:
    """Manage Supabase storage uploads"""

    def __init__(self, bucket_name: Optional[str] = None, client: Optional[Client] = None):
        """Initialize storage manager with Supabase client

        Args:
            bucket_name: Optional bucket name (defaults to VIDEO_BUCKET env or 'videos')
            client: Optional pre-built Supabase client
        """
        if client is None:
            supabase_url, supabase_key = Config.get_supabase_credentials()

            if not supabase_url or not supabase_key:
                raise ValueError("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY environment variables")

            client = create_client(supabase_url, supabase_key)

        self.supabase: Client = client
        self.bucket_name = bucket_name or Config.get_video_bucket()

    def upload_video(
        self,
        file_path: str,
        destination: str,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None
    ) -> Tuple[bool, Optional[str]]:
        """
        Upload a downloaded video to storage

        Args:
            file_path: Local path to the video file
            destination: Storage path within the bucket (e.g., 'videos/<id>.mp4')
            content_type: MIME type (guessed from the extension if omitted)
            metadata: Custom object metadata (original URL, uploader, title)

        Returns:
            Tuple of (success, storage_path)
        """
        try:
            file_options = {
                "content-type": content_type or content_type_for(file_path),
                "upsert": "true",
            }
            if metadata:
                file_options["metadata"] = {k: str(v) for k, v in metadata.items() if v is not None}

            logger.info(f"📤 Uploading video to storage: {self.bucket_name}/{destination}")

            with open(file_path, 'rb') as f:
                self.supabase.storage.from_(self.bucket_name).upload(
                    path=destination,
                    file=f.read(),
                    file_options=file_options
                )

            logger.info(f"✅ Video uploaded successfully: {destination}")
            return True, destination

        except Exception as e:
            logger.error(f"❌ Failed to upload video: {e}", exc_info=True)
            return False, None

    def get_signed_url(self, storage_path: str, expiry_seconds: Optional[int] = None) -> Optional[str]:
        """
        Get a signed read URL for a stored file

        Args:
            storage_path: Path within the storage bucket
            expiry_seconds: Validity period (defaults to ~10 years)

        Returns:
            Signed URL or None if failed
        """
        try:
            result = self.supabase.storage.from_(self.bucket_name).create_signed_url(
                storage_path,
                expiry_seconds or Config.get_signed_url_expiry()
            )

            if result:
                signed_url = result.get('signedURL') or result.get('signedUrl')
                if signed_url:
                    return signed_url

            logger.warning(f"⚠️ Could not get signed URL for: {storage_path}")
            return None

        except Exception as e:
            logger.error(f"❌ Failed to get signed URL: {e}", exc_info=True)
            return None

    def delete_file(self, storage_path: str) -> bool:
        """
        Delete a file from storage

        Returns:
            True if deletion was successful
        """
        try:
            self.supabase.storage.from_(self.bucket_name).remove([storage_path])
            logger.info(f"🗑️ Deleted from storage: {self.bucket_name}/{storage_path}")
            return True
        except Exception as e:
            logger.error(f"❌ Failed to delete {storage_path}: {e}", exc_info=True)
            return False

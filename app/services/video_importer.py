#!/usr/bin/env python3
"""
Social Video Importer

Imports a video from a social media post (Instagram, TikTok, YouTube, ...)
into the library:

1. Try to find a direct video URL in the page (Open Graph / inline JSON)
   and stream it to a temp file
2. Otherwise fall back to yt-dlp, trying each invocation strategy
3. Upload the file to Supabase storage and sign a read URL
4. Save a draft video record to the library

Failures never propagate to the caller: every error is logged, temp files
are removed, and an ImportResult with success=False is returned.

Usage (via FastAPI):
    POST /api/import
    {"url": "https://www.instagram.com/reel/..."}
"""

import os
import uuid
import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional
import requests

from core.config import Config
from core.page_extractor import extract_social_video_url
from core.storage_manager import StorageManager, StorageError, content_type_for
from core.video_store import VideoStore
from core.ytdlp_runner import (
    YtDlpRunner,
    parse_print_json,
    find_downloaded_file,
    cleanup_partial_files,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, Dict], None]

LOGIN_REQUIRED_ERROR = "Instagram requires login to view this post. Try a public post or configure cookies."


@dataclass
class VideoRecord:
    """A library video record as stored in the `videos` table"""
    title: str
    description: str
    video_url: str
    original_url: str
    thumbnail_url: str = ''
    tags: List[str] = field(default_factory=list)
    type: str = 'video'
    uploader: str = 'Unknown'
    duration: float = 0
    width: int = 0
    height: int = 0
    status: str = 'draft'
    folder_id: Optional[str] = None
    author_name: str = ''
    author_url: str = ''
    author_avatar_url: str = ''
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict:
        """Serializable form with ISO 8601 timestamps"""
        data = asdict(self)
        data['created_at'] = self.created_at.isoformat()
        data['updated_at'] = self.updated_at.isoformat()
        return data


@dataclass
class ImportResult:
    """Outcome of an import attempt"""
    success: bool
    video_id: Optional[str] = None
    video: Optional[Dict] = None
    error: Optional[str] = None
    strategy: Optional[str] = None

    def to_dict(self) -> Dict:
        if not self.success:
            return {'success': False, 'error': self.error}
        return {
            'success': True,
            'video_id': self.video_id,
            'video': self.video,
            'strategy': self.strategy,
        }


def build_video_record(
    info: Dict,
    url: str,
    video_url: str,
    folder_id: Optional[str] = None
) -> VideoRecord:
    """
    Derive a library record from downloader metadata

    Args:
        info: yt-dlp info dict (or the page-derived equivalent)
        url: The original post URL
        video_url: Playable URL of the stored copy
        folder_id: Optional library folder

    Returns:
        VideoRecord with defaults filled in for missing fields
    """
    uploader = info.get('uploader') or 'Unknown'

    return VideoRecord(
        title=info.get('title') or 'Downloaded Video',
        description=info.get('description') or f"Imported from {url}",
        video_url=video_url,
        original_url=url,
        thumbnail_url=info.get('thumbnail') or '',
        tags=list(info.get('tags') or []),
        uploader=uploader,
        duration=info.get('duration') or 0,
        width=info.get('width') or 0,
        height=info.get('height') or 0,
        folder_id=folder_id or None,
        author_name=info.get('uploader') or info.get('channel') or info.get('creator') or '',
        # yt-dlp rarely knows the profile URL for reels; the post itself is the best link back
        author_url=info.get('uploader_url') or info.get('channel_url') or url,
        author_avatar_url='',
    )


def friendly_error(message: str) -> str:
    """Map a raw failure message to the error shown to admins"""
    if any(marker in message for marker in Config.LOGIN_REQUIRED_MARKERS):
        return LOGIN_REQUIRED_ERROR
    return f"Download failed: {message}"


class SocialVideoImporter:
    """Runs the import pipeline for one URL at a time"""

    def __init__(
        self,
        storage: Optional[StorageManager] = None,
        store: Optional[VideoStore] = None,
        runner: Optional[YtDlpRunner] = None,
        session: Optional[requests.Session] = None,
        temp_dir: Optional[str] = None,
        use_direct_extraction: bool = True
    ):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._storage = storage
        self._store = store
        self.runner = runner or YtDlpRunner()
        self.session = session if session else requests.Session()
        self.temp_dir = temp_dir or Config.get_temp_dir()
        self.use_direct_extraction = use_direct_extraction

    @property
    def storage(self) -> StorageManager:
        if self._storage is None:
            self._storage = StorageManager()
        return self._storage

    @property
    def store(self) -> VideoStore:
        if self._store is None:
            self._store = VideoStore()
        return self._store

    def import_video(
        self,
        url: str,
        save_to_store: bool = True,
        folder_id: Optional[str] = None,
        progress: Optional[ProgressCallback] = None
    ) -> ImportResult:
        """
        Download a social video and add it to the library

        Args:
            url: Post URL
            save_to_store: If False, upload and return metadata without saving a record
            folder_id: Optional folder for the new record
            progress: Optional callback receiving (event_type, data) as stages complete

        Returns:
            ImportResult (never raises)
        """
        def emit(event_type: str, data: Optional[Dict] = None):
            if progress is None:
                return
            try:
                progress(event_type, data or {})
            except Exception as e:
                self.logger.warning(f"⚠️ Progress callback failed for {event_type}: {e}")

        unique_id = str(uuid.uuid4())
        output_path = os.path.join(self.temp_dir, f"{unique_id}.mp4")

        self.logger.info(f"⬇️ Starting import for: {url}")
        self.logger.info(f"   Temp file: {output_path}")
        uploaded_path = None

        try:
            emit('fetch_start', {'url': url})

            info = None
            strategy = None

            if self.use_direct_extraction:
                info = self._try_direct_download(url, output_path)
                if info is not None:
                    strategy = 'direct'
                    emit('direct_found', {'video_url': info.get('media_url')})

            if info is None:
                # Drop anything a failed direct attempt left behind
                cleanup_partial_files(self.temp_dir, unique_id)
                emit('ytdlp_start', {})
                stdout, strategy = self.runner.download(
                    url,
                    output_path,
                    on_strategy=lambda name: emit('ytdlp_strategy', {'strategy': name})
                )
                info = parse_print_json(stdout)

            downloaded = find_downloaded_file(self.temp_dir, unique_id)
            if not downloaded:
                raise FileNotFoundError("Downloaded file not found. yt-dlp might have failed to save the file.")

            ext = downloaded.suffix or '.mp4'
            destination = f"{Config.STORAGE_PREFIX}/{unique_id}{ext}"
            size_mb = downloaded.stat().st_size / (1024 * 1024)
            self.logger.info(f"📊 Downloaded file: {downloaded.name} ({size_mb:.1f}MB)")

            emit('upload_start', {'destination': destination})
            uploaded, storage_path = self.storage.upload_video(
                str(downloaded),
                destination,
                content_type=content_type_for(str(downloaded)),
                metadata={
                    'originalUrl': url,
                    'uploader': info.get('uploader') or 'Unknown',
                    'title': info.get('title') or 'Downloaded Video',
                }
            )
            if not uploaded:
                raise StorageError(f"Upload to storage failed for {destination}")
            uploaded_path = storage_path

            signed_url = self.storage.get_signed_url(storage_path)
            if not signed_url:
                raise StorageError(f"Could not sign URL for {storage_path}")

            record = build_video_record(info, url, signed_url, folder_id)
            document = record.to_dict()

            video_id = None
            if save_to_store:
                emit('save_start', {})
                video_id = self.store.add_video(document)
                self.logger.info(f"✅ Success! Video ID: {video_id}")
            else:
                self.logger.info("✅ Success! Returned metadata without saving to the library")

            result = ImportResult(
                success=True,
                video_id=video_id,
                video={'id': video_id, **document},
                strategy=strategy
            )
            emit('completed', {'video_id': video_id, 'strategy': strategy})
            return result

        except Exception as e:
            self.logger.error(f"❌ Import failed for {url}: {e}", exc_info=True)
            if uploaded_path:
                # No record points at the object, so remove it
                self.storage.delete_file(uploaded_path)
            error = friendly_error(str(e))
            emit('error', {'error': error})
            return ImportResult(success=False, error=error)

        finally:
            cleanup_partial_files(self.temp_dir, unique_id)

    def _try_direct_download(self, url: str, output_path: str) -> Optional[Dict]:
        """
        Stage 1: extract a direct video URL from the page and stream it

        Returns:
            Info dict in yt-dlp's shape, or None to fall back to yt-dlp
        """
        extracted = extract_social_video_url(url, session=self.session)
        if not extracted.get('success'):
            self.logger.info(f"🔄 No direct video URL ({extracted.get('error')}), falling back to yt-dlp")
            return None

        media_url = extracted['video_url']
        try:
            if not self._stream_to_file(media_url, output_path):
                return None
        except Exception as e:
            self.logger.warning(f"⚠️ Direct download failed, falling back to yt-dlp: {e}")
            return None

        return {
            'title': extracted.get('title') or None,
            'description': extracted.get('description') or None,
            'thumbnail': extracted.get('thumbnail_url') or None,
            'media_url': media_url,
        }

    def _stream_to_file(self, media_url: str, output_path: str) -> bool:
        """
        Stream a media URL to disk in chunks

        Returns:
            False if the response is not a video (e.g., an embed page)
        """
        self.logger.info(f"⬇️ Streaming direct video: {media_url[:100]}")

        with self.session.get(
            media_url,
            headers=Config.get_browser_headers(),
            stream=True,
            timeout=Config.LONG_TIMEOUT
        ) as response:
            response.raise_for_status()

            content_type = response.headers.get('content-type', '')
            if not content_type.startswith('video/'):
                self.logger.info(f"🔄 Direct URL is not a video ({content_type or 'unknown type'}), falling back")
                return False

            with open(output_path, 'wb') as f:
                for chunk in response.iter_content(chunk_size=Config.DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)

        if Path(output_path).stat().st_size == 0:
            self.logger.info("🔄 Direct download was empty, falling back")
            return False

        return True

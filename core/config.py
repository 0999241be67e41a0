#!/usr/bin/env python3
"""
Centralized configuration management for the social video importer
"""

import os
import sys
import shutil
import tempfile
from typing import Dict, List, Optional, Tuple


class Config:
    """Centralized configuration constants and environment management"""

    # HTTP timeouts (seconds)
    DEFAULT_TIMEOUT = 30
    LONG_TIMEOUT = 300

    # yt-dlp settings
    YTDLP_FORMAT = 'bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best'
    YTDLP_TIMEOUT_SECONDS = 600

    # Error reporting limits (characters)
    STDERR_LOG_CHARS = 500
    STDERR_ERROR_CHARS = 200
    HTML_SNIPPET_CHARS = 500

    # Streaming downloads
    DOWNLOAD_CHUNK_SIZE = 1024 * 1024

    # Storage / document store
    DEFAULT_VIDEO_BUCKET = 'videos'
    STORAGE_PREFIX = 'videos'
    DEFAULT_VIDEOS_TABLE = 'videos'
    DEFAULT_FOLDERS_TABLE = 'folders'
    SIGNED_URL_EXPIRY_SECONDS = 10 * 365 * 24 * 3600  # ~10 years, effectively permanent

    # Social migration
    SOCIAL_FOLDER_NAME = 'Instagram'
    SOCIAL_UPLOADER_HOSTS = ('instagram', 'tiktok')

    # Error text substrings that mean the platform wants a logged-in session
    LOGIN_REQUIRED_MARKERS = ('Sign in', 'login', '403')

    @staticmethod
    def get_supabase_credentials() -> Tuple[Optional[str], Optional[str]]:
        """Get Supabase URL and service role key"""
        return os.getenv('SUPABASE_URL'), os.getenv('SUPABASE_SERVICE_ROLE_KEY')

    @staticmethod
    def get_video_bucket() -> str:
        return os.getenv('VIDEO_BUCKET', Config.DEFAULT_VIDEO_BUCKET)

    @staticmethod
    def get_table_names() -> Dict[str, str]:
        """Get document store table names"""
        return {
            'videos': os.getenv('VIDEOS_TABLE', Config.DEFAULT_VIDEOS_TABLE),
            'folders': os.getenv('FOLDERS_TABLE', Config.DEFAULT_FOLDERS_TABLE),
        }

    @staticmethod
    def get_signed_url_expiry() -> int:
        value = os.getenv('SIGNED_URL_EXPIRY_SECONDS')
        if value and value.isdigit():
            return int(value)
        return Config.SIGNED_URL_EXPIRY_SECONDS

    @staticmethod
    def get_ytdlp_timeout() -> int:
        value = os.getenv('YTDLP_TIMEOUT_SECONDS')
        if value and value.isdigit():
            return int(value)
        return Config.YTDLP_TIMEOUT_SECONDS

    @staticmethod
    def get_ytdlp_cookies_file() -> Optional[str]:
        """Optional Netscape cookies file passed to yt-dlp for login-walled posts"""
        path = os.getenv('YTDLP_COOKIES_FILE')
        if path and os.path.exists(path):
            return path
        return None

    @staticmethod
    def get_ytdlp_command_strategies() -> List[Tuple[str, str, List[str]]]:
        """
        Get the ordered yt-dlp invocation strategies

        Returns:
            List of (strategy_name, executable, leading_args)
        """
        return [
            ('binary', os.getenv('YTDLP_BINARY', 'yt-dlp'), []),
            ('python_module', sys.executable or 'python', ['-m', 'yt_dlp']),
        ]

    @staticmethod
    def get_temp_dir() -> str:
        return os.getenv('TEMP_DIR') or tempfile.gettempdir()

    @staticmethod
    def get_cors_origins() -> List[str]:
        return [origin.strip() for origin in os.getenv('CORS_ORIGINS', '*').split(',') if origin.strip()]

    @staticmethod
    def get_browser_headers() -> Dict[str, str]:
        """Get default desktop browser HTTP headers"""
        return {
            'User-Agent': os.getenv(
                'USER_AGENT',
                'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
                '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'
            ),
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
        }

    @staticmethod
    def get_preview_crawler_headers() -> Dict[str, str]:
        """
        Headers that identify as the Facebook link preview crawler.

        Social platforms usually serve Open Graph tags to this crawler even
        when they put a login wall in front of regular browsers.
        """
        return {
            'User-Agent': 'facebookexternalhit/1.1 (+http://www.facebook.com/externalhit_uatext.php)',
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
        }

    @staticmethod
    def is_ytdlp_available() -> bool:
        """Check whether any yt-dlp invocation strategy can be found"""
        if shutil.which(os.getenv('YTDLP_BINARY', 'yt-dlp')):
            return True
        try:
            import importlib.util
            return importlib.util.find_spec('yt_dlp') is not None
        except (ImportError, ValueError):
            return False

    @staticmethod
    def validate_environment() -> Dict[str, object]:
        """Validate required environment variables and return status"""
        required_for_full_functionality = {
            'SUPABASE_URL': bool(os.getenv('SUPABASE_URL')),
            'SUPABASE_SERVICE_ROLE_KEY': bool(os.getenv('SUPABASE_SERVICE_ROLE_KEY')),
        }

        optional = {
            'VIDEO_BUCKET': bool(os.getenv('VIDEO_BUCKET')),
            'YTDLP_COOKIES_FILE': bool(os.getenv('YTDLP_COOKIES_FILE')),
            'CORS_ORIGINS': bool(os.getenv('CORS_ORIGINS')),
        }

        return {
            'required': required_for_full_functionality,
            'optional': optional,
            'all_required_present': all(required_for_full_functionality.values()),
            'missing': [name for name, present in required_for_full_functionality.items() if not present],
        }

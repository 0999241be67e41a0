#!/usr/bin/env python3
"""
Import a social media video from the command line

Runs the same pipeline as POST /api/import, without going through the API.

Usage:
    python3 scripts/import_video_cli.py <url> [options]

Examples:
    python3 scripts/import_video_cli.py "https://www.instagram.com/reel/abc123/"
    python3 scripts/import_video_cli.py "https://www.tiktok.com/@user/video/123" --folder-id 42
    python3 scripts/import_video_cli.py "https://youtube.com/shorts/abc" --no-save --ytdlp-only

Environment Variables:
    SUPABASE_URL                Supabase project URL
    SUPABASE_SERVICE_ROLE_KEY   Supabase service role key
    YTDLP_COOKIES_FILE          Optional cookies file for login-walled posts
"""

import os
import sys
import json
import argparse
import logging

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dotenv import load_dotenv
load_dotenv('.env.local')
load_dotenv()

from app.services.video_importer import SocialVideoImporter

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def print_event(event_type: str, data: dict):
    print(f"   • {event_type} {json.dumps(data) if data else ''}".rstrip())


def main():
    parser = argparse.ArgumentParser(description='Import a social media video into the library')
    parser.add_argument('url', help='Post URL (Instagram, TikTok, YouTube, ...)')
    parser.add_argument('--no-save', action='store_true', help='Upload only, do not create a library record')
    parser.add_argument('--folder-id', default=None, help='Folder to place the new video in')
    parser.add_argument('--ytdlp-only', action='store_true', help='Skip direct page extraction and use yt-dlp')
    args = parser.parse_args()

    importer = SocialVideoImporter(use_direct_extraction=not args.ytdlp_only)

    print(f"⬇️ Importing {args.url}")
    result = importer.import_video(
        args.url,
        save_to_store=not args.no_save,
        folder_id=args.folder_id,
        progress=print_event
    )

    if result.success:
        print(f"✅ Imported via {result.strategy}")
        print(f"   Video ID: {result.video_id or '(not saved)'}")
        print(f"   Title: {result.video.get('title')}")
        print(f"   URL: {result.video.get('video_url')}")
    else:
        print(f"❌ {result.error}")
        sys.exit(1)


if __name__ == '__main__':
    main()

#!/usr/bin/env python3
"""
Move Social Videos into the Instagram Folder

Finds every video that came from a social media import and moves it into
the "Instagram" folder, creating the folder first if needed.

Usage:
    python3 scripts/move_social_videos.py [--dry-run]
"""

import os
import sys
import argparse
import logging

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dotenv import load_dotenv
load_dotenv('.env.local')
load_dotenv()

from app.services.social_migration import migrate_social_videos
from core.video_store import VideoStore

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description='Move social videos into the Instagram folder')
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be moved without updating anything'
    )
    args = parser.parse_args()

    try:
        store = VideoStore()
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    result = migrate_social_videos(store, dry_run=args.dry_run)

    for row in result['report']:
        marker = 'unsorted' if row['is_unsorted'] else f"folder {row['folder_id']}"
        logger.info(f"   {row['id']}: {row['title'] or '(untitled)'} [{marker}]")

    logger.info(f"🏁 {result['message']}")


if __name__ == '__main__':
    main()

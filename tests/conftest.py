"""
Shared pytest fixtures for the social video importer tests

This file contains fixtures that are available to all test files.
"""

import json
import pytest
from typing import Dict
from unittest.mock import MagicMock

# JSON string escapes as they appear in raw page source
BACKSLASH = '\\'
ESCAPED_AMP = BACKSLASH + 'u0026'
ESCAPED_PERCENT = BACKSLASH + 'u0025'


@pytest.fixture
def sample_urls() -> Dict[str, str]:
    """Sample post URLs for testing"""
    return {
        'instagram_post': 'https://www.instagram.com/p/DSEtLEyl9EB/',
        'instagram_reel': 'https://www.instagram.com/reel/C1abcDEFgh/',
        'tiktok': 'https://www.tiktok.com/@animator/video/7300000000000000000',
        'youtube_short': 'https://www.youtube.com/shorts/dQw4w9WgXcQ',
        'blog_post': 'https://example.com/blog/my-article',
    }


@pytest.fixture
def og_video_html() -> str:
    """Instagram-style page with Open Graph video tags"""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Instagram</title>
        <meta property="og:title" content="Animator on Instagram: Walk cycle &amp; timing" />
        <meta property="og:description" content="1,234 likes - walk cycle study" />
        <meta property="og:image" content="https://scontent.cdninstagram.com/thumb.jpg?a=1&amp;b=2" />
        <meta property="og:video" content="https://scontent.cdninstagram.com/video.mp4?efg=abc&amp;oh=123" />
    </head>
    <body></body>
    </html>
    """


@pytest.fixture
def json_video_html() -> str:
    """Page without Open Graph video where the URL only lives in inline JSON"""
    video_url = f"https:{BACKSLASH}/{BACKSLASH}/cdn.example.com{BACKSLASH}/v.mp4?a=1{ESCAPED_AMP}b=2{ESCAPED_PERCENT}20"
    display_url = f"https:{BACKSLASH}/{BACKSLASH}/cdn.example.com{BACKSLASH}/d.jpg?x=1{ESCAPED_AMP}y=2"
    return (
        '<html><head><title>Post</title></head><body>'
        '<script type="application/json">'
        '{"items":[{"video_url":"' + video_url + '","display_url":"' + display_url + '"}]}'
        '</script></body></html>'
    )


@pytest.fixture
def login_wall_html() -> str:
    """Page served to bots without any video information"""
    return """
    <html>
    <head><title>Login • Instagram</title></head>
    <body><form action="/accounts/login/"></form></body>
    </html>
    """


@pytest.fixture
def ytdlp_info() -> Dict:
    """Subset of a yt-dlp --print-json info dict"""
    return {
        'id': 'C1abcDEFgh',
        'title': 'Walk cycle study',
        'description': 'Frame by frame walk cycle',
        'uploader': 'animator',
        'uploader_url': 'https://www.instagram.com/animator',
        'channel': 'Animator Channel',
        'tags': ['walk', 'cycle'],
        'duration': 12.5,
        'width': 1080,
        'height': 1920,
        'thumbnail': 'https://cdn.example.com/thumb.jpg',
    }


@pytest.fixture
def ytdlp_stdout(ytdlp_info) -> str:
    """What yt-dlp prints with --print-json"""
    return json.dumps(ytdlp_info) + '\n'


@pytest.fixture
def mock_supabase() -> MagicMock:
    """Supabase client mock supporting chained table/storage calls"""
    client = MagicMock()
    bucket = client.storage.from_.return_value
    bucket.create_signed_url.return_value = {'signedURL': 'https://storage.example.com/signed/video.mp4?token=t'}
    return client


@pytest.fixture
def mock_store() -> MagicMock:
    """VideoStore stand-in"""
    store = MagicMock()
    store.add_video.return_value = 'video-123'
    return store


@pytest.fixture
def mock_storage() -> MagicMock:
    """StorageManager stand-in"""
    storage = MagicMock()
    storage.upload_video.side_effect = lambda file_path, destination, **kwargs: (True, destination)
    storage.get_signed_url.return_value = 'https://storage.example.com/signed/video.mp4?token=t'
    return storage

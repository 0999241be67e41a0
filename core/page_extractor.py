#!/usr/bin/env python3
"""
Page Extraction Utilities

Heuristic extraction of playable video URLs and preview metadata from
social media pages. Social platforms rarely expose a stable API, so this
reads Open Graph tags first and falls back to fields embedded in inline
JSON blobs.
"""

import re
import logging
from typing import Dict, Optional
import requests
from bs4 import BeautifulSoup

from core.config import Config

logger = logging.getLogger(__name__)


class PageFetchError(Exception):
    """Raised when a page cannot be fetched"""


OG_VIDEO_PROPERTIES = ('og:video', 'og:video:url', 'og:video:secure_url')

_JSON_VIDEO_URL = re.compile(r'"video_url"\s*:\s*"([^"]+)"')
_JSON_DISPLAY_URL = re.compile(r'"display_url"\s*:\s*"([^"]+)"')
_JSON_UNICODE_ESCAPE = re.compile(r'\\u([0-9a-fA-F]{4})')
_TITLE_TAG = re.compile(r'<title[^>]*>([^<]*)</title>', re.IGNORECASE)


def unescape_embedded_url(value: str) -> str:
    """
    Undo HTML entity and JSON string escaping on a URL scraped from page source

    Examples:
        >>> unescape_embedded_url('https://cdn.example.com/v.mp4?a=1&amp;b=2')
        'https://cdn.example.com/v.mp4?a=1&b=2'
        >>> unescape_embedded_url('https:\\\\/\\\\/cdn.example.com\\\\/v.mp4')
        'https://cdn.example.com/v.mp4'
    """
    if not value:
        return ''
    unescaped = value.replace('&amp;', '&')
    unescaped = _JSON_UNICODE_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), unescaped)
    # Whatever backslashes remain are JSON escapes of '/' and friends
    return unescaped.replace('\\', '')


def _decode_entities(value: str) -> str:
    return value.replace('&amp;', '&') if value else ''


def _parse_html(html: str) -> Optional[BeautifulSoup]:
    try:
        return BeautifulSoup(html, 'html.parser')
    except Exception as e:
        logger.debug(f"Could not parse HTML: {e}")
        return None


def _meta_content(soup: Optional[BeautifulSoup], html: str, attr: str, value: str) -> str:
    """
    Read a <meta {attr}="{value}" content="..."> tag

    Falls back to a regex over the raw source when the parser gave up on
    malformed markup.
    """
    if soup is not None:
        tag = soup.find('meta', attrs={attr: value})
        if tag and tag.get('content'):
            return tag['content']

    pattern = re.compile(
        r'<meta\s+' + attr + r'="' + re.escape(value) + r'"\s+content="([^"]*)"',
        re.IGNORECASE
    )
    match = pattern.search(html or '')
    return match.group(1) if match else ''


def parse_social_video_html(html: str) -> Optional[Dict[str, str]]:
    """
    Find a playable video URL (and thumbnail) in social media page source

    Lookup order:
    1. Open Graph video tags
    2. "video_url" fields inside inline JSON

    Args:
        html: Raw page source

    Returns:
        Dict with video_url and thumbnail_url, or None if no video was found
    """
    if not html:
        return None

    soup = _parse_html(html)

    video_url = ''
    for prop in OG_VIDEO_PROPERTIES:
        video_url = _meta_content(soup, html, 'property', prop)
        if video_url:
            break

    if not video_url:
        match = _JSON_VIDEO_URL.search(html)
        if match:
            video_url = match.group(1)

    if not video_url:
        return None

    thumbnail_url = _meta_content(soup, html, 'property', 'og:image')
    if not thumbnail_url:
        match = _JSON_DISPLAY_URL.search(html)
        if match:
            thumbnail_url = match.group(1)

    return {
        'video_url': unescape_embedded_url(video_url),
        'thumbnail_url': unescape_embedded_url(thumbnail_url),
    }


def extract_social_video_url(url: str, session: Optional[requests.Session] = None) -> Dict:
    """
    Fetch a social media post and extract its direct video URL

    Identifies as a link preview crawler, which is usually allowed to see
    Open Graph tags. A non-2xx status is logged but parsing is still
    attempted since login redirects sometimes still carry the tags.

    Args:
        url: Post URL (e.g., an Instagram reel)
        session: Optional requests session to use

    Returns:
        {'success': True, 'video_url', 'thumbnail_url', 'title', 'description'}
        or {'success': False, 'error': ...}
    """
    try:
        if session is None:
            session = requests.Session()

        response = session.get(
            url,
            headers=Config.get_preview_crawler_headers(),
            timeout=Config.DEFAULT_TIMEOUT
        )

        if not response.ok:
            logger.warning(f"⚠️ Page fetch status: {response.status_code} for {url}")

        html = response.text or ''
        result = parse_social_video_html(html)

        if result:
            logger.info(f"🎥 Found direct video URL for {url}")
            page = parse_page_metadata(html)
            return {
                'success': True,
                **result,
                'title': page['title'],
                'description': page['description'],
            }

        logger.error(f"❌ No video URL found. HTML snippet: {html[:Config.HTML_SNIPPET_CHARS]}")
        return {
            'success': False,
            'error': 'No video URL found. Instagram may require login or is detecting the bot.',
        }

    except Exception as e:
        logger.error(f"❌ Error extracting video URL from {url}: {e}")
        return {
            'success': False,
            'error': str(e) or 'Unknown error occurred',
        }


def parse_page_metadata(html: str) -> Dict[str, str]:
    """
    Read preview metadata (title, description, image) from page source

    Args:
        html: Raw page source

    Returns:
        Dict with title, description, and image (empty strings when missing)
    """
    soup = _parse_html(html or '')

    title = _meta_content(soup, html, 'property', 'og:title')
    if not title:
        if soup is not None and soup.title and soup.title.string:
            title = soup.title.string.strip()
        else:
            match = _TITLE_TAG.search(html or '')
            title = match.group(1).strip() if match else ''

    description = (
        _meta_content(soup, html, 'property', 'og:description')
        or _meta_content(soup, html, 'name', 'description')
    )
    image = _meta_content(soup, html, 'property', 'og:image')

    return {
        'title': _decode_entities(title),
        'description': _decode_entities(description),
        'image': image,
    }


def extract_page_metadata(url: str, session: Optional[requests.Session] = None) -> Dict[str, str]:
    """
    Fetch a page and return its preview metadata

    Raises:
        PageFetchError: If the page could not be fetched
    """
    if session is None:
        session = requests.Session()

    try:
        response = session.get(url, headers=Config.get_browser_headers(), timeout=Config.DEFAULT_TIMEOUT)
    except requests.RequestException as e:
        raise PageFetchError(str(e)) from e

    if not response.ok:
        raise PageFetchError(f"Failed to fetch URL: {response.reason or response.status_code}")

    return parse_page_metadata(response.text)

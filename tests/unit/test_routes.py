"""
Unit tests for the API routes

The routers are mounted on a bare FastAPI app so the tests skip the
logging and lifespan setup in app/main.py. Services are patched.
"""

import pytest
from unittest.mock import MagicMock, Mock, patch
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.routes import admin, importer, media
from app.services.video_importer import ImportResult
from core.page_extractor import PageFetchError


@pytest.fixture
def client():
    app = FastAPI()
    app.include_router(importer.router, prefix="/api")
    app.include_router(media.router, prefix="/api")
    app.include_router(admin.router, prefix="/api/admin")
    return TestClient(app)


@pytest.fixture
def fake_importer():
    fake = Mock()

    def import_video(url, save_to_store=True, folder_id=None, progress=None):
        if progress:
            progress('fetch_start', {'url': url})
            progress('completed', {'video_id': 'video-123'})
        return ImportResult(success=True, video_id='video-123', video={'id': 'video-123'}, strategy='binary')

    fake.import_video.side_effect = import_video
    return fake


class TestImportRoutes:
    """Tests for /api/import and /api/import/stream"""

    @pytest.mark.unit
    def test_import(self, client, fake_importer):
        with patch('app.routes.importer.get_importer', return_value=fake_importer):
            response = client.post('/api/import', json={'url': ' https://www.instagram.com/p/x/ ', 'folder_id': 'f1'})

        assert response.status_code == 200
        body = response.json()
        assert body['success'] is True
        assert body['video_id'] == 'video-123'
        assert 'error' not in body
        fake_importer.import_video.assert_called_once()
        assert fake_importer.import_video.call_args.args[0] == 'https://www.instagram.com/p/x/'
        assert fake_importer.import_video.call_args.kwargs['folder_id'] == 'f1'

    @pytest.mark.unit
    def test_import_failure_is_reported_in_body(self, client):
        failing = Mock()
        failing.import_video.return_value = ImportResult(success=False, error='Download failed: boom')

        with patch('app.routes.importer.get_importer', return_value=failing):
            response = client.post('/api/import', json={'url': 'https://x.com/v'})

        assert response.status_code == 200
        assert response.json() == {'success': False, 'error': 'Download failed: boom'}

    @pytest.mark.unit
    def test_import_requires_url(self, client):
        response = client.post('/api/import', json={'url': '   '})
        assert response.status_code == 400

    @pytest.mark.unit
    def test_stream_ends_with_completed_result(self, client, fake_importer):
        with patch('app.routes.importer.get_importer', return_value=fake_importer):
            response = client.get('/api/import/stream', params={'url': 'https://www.instagram.com/p/x/'})

        assert response.status_code == 200
        text = response.text
        assert text.index('event: ping') < text.index('event: fetch_start') < text.index('event: completed')
        assert text.count('event: completed') == 1
        assert 'event: result' not in text
        tail = text[text.index('event: completed'):]
        assert '"video_id": "video-123"' in tail
        assert '"strategy": "binary"' in tail

    @pytest.mark.unit
    def test_stream_ends_with_error(self, client):
        def import_video(url, save_to_store=True, folder_id=None, progress=None):
            progress('fetch_start', {'url': url})
            progress('error', {'error': 'Download failed: boom'})
            return ImportResult(success=False, error='Download failed: boom')

        failing = Mock()
        failing.import_video.side_effect = import_video

        with patch('app.routes.importer.get_importer', return_value=failing):
            response = client.get('/api/import/stream', params={'url': 'https://x.com/v'})

        text = response.text
        assert text.count('event: error') == 1
        assert 'event: completed' not in text
        assert '"error": "Download failed: boom"' in text[text.index('event: error'):]


class TestMediaRoutes:
    """Tests for /api/extract, /api/metadata, and /api/proxy-download"""

    @pytest.mark.unit
    def test_extract_requires_url(self, client):
        assert client.get('/api/extract').status_code == 400

    @pytest.mark.unit
    @patch('app.routes.media.extract_social_video_url')
    def test_extract(self, mock_extract, client):
        mock_extract.return_value = {'success': True, 'video_url': 'https://cdn/v.mp4'}

        response = client.get('/api/extract', params={'url': 'https://www.instagram.com/p/x/'})

        assert response.json()['video_url'] == 'https://cdn/v.mp4'

    @pytest.mark.unit
    def test_metadata_requires_url(self, client):
        response = client.get('/api/metadata')
        assert response.status_code == 400
        assert response.json() == {'error': 'URL is required'}

    @pytest.mark.unit
    @patch('app.routes.media.extract_page_metadata')
    def test_metadata(self, mock_metadata, client):
        mock_metadata.return_value = {'title': 'T', 'description': 'D', 'image': 'I'}

        response = client.get('/api/metadata', params={'url': 'https://example.com'})

        assert response.json() == {'title': 'T', 'description': 'D', 'image': 'I'}

    @pytest.mark.unit
    @patch('app.routes.media.extract_page_metadata')
    def test_metadata_failure(self, mock_metadata, client):
        mock_metadata.side_effect = PageFetchError('Failed to fetch URL: 404 Not Found')

        response = client.get('/api/metadata', params={'url': 'https://example.com'})

        assert response.status_code == 500
        assert response.json()['error'].startswith('Failed to fetch metadata:')

    @pytest.mark.unit
    def test_proxy_requires_url(self, client):
        response = client.get('/api/proxy-download')
        assert response.status_code == 400
        assert response.text == 'Missing URL parameter'

    @pytest.mark.unit
    @patch('app.routes.media.requests.get')
    def test_proxy_streams_body(self, mock_get, client):
        upstream = MagicMock()
        upstream.ok = True
        upstream.headers = {'content-type': 'video/mp4'}
        upstream.iter_content.return_value = [b'abc', b'def']
        mock_get.return_value = upstream

        response = client.get('/api/proxy-download', params={'url': 'https://cdn/v.mp4'})

        assert response.status_code == 200
        assert response.content == b'abcdef'
        assert response.headers['content-type'] == 'video/mp4'
        upstream.close.assert_called()

    @pytest.mark.unit
    @patch('app.routes.media.requests.get')
    def test_proxy_upstream_error(self, mock_get, client):
        mock_get.return_value = MagicMock(ok=False, status_code=404)

        response = client.get('/api/proxy-download', params={'url': 'https://cdn/missing.mp4'})

        assert response.status_code == 500
        assert response.text == 'Failed to download file'


class TestAdminRoutes:
    """Tests for /api/admin/migrate-social"""

    @pytest.mark.unit
    @patch('app.routes.admin.migrate_social_videos')
    @patch('app.routes.admin.VideoStore')
    def test_migrate(self, mock_store_cls, mock_migrate, client):
        mock_migrate.return_value = {'success': True, 'message': 'Would move 1 videos to Instagram folder.', 'moved': 0}

        response = client.post('/api/admin/migrate-social', params={'dry_run': 'true'})

        assert response.status_code == 200
        assert response.json()['success'] is True
        assert mock_migrate.call_args.kwargs['dry_run'] is True

    @pytest.mark.unit
    @patch('app.routes.admin.VideoStore')
    def test_migrate_failure(self, mock_store_cls, client):
        mock_store_cls.side_effect = ValueError('Missing SUPABASE_URL')

        response = client.post('/api/admin/migrate-social')

        assert response.status_code == 500
        assert response.json() == {'success': False, 'error': 'Missing SUPABASE_URL'}

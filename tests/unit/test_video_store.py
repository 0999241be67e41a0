"""
Unit tests for core/video_store.py

Supabase table calls are chained (table().insert().execute()), so the
client is a MagicMock and results are set on the chain ends.
"""

import pytest
from unittest.mock import MagicMock, Mock

from core.video_store import VideoStore


def result(data):
    return Mock(data=data)


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def store(client, monkeypatch):
    monkeypatch.delenv('VIDEOS_TABLE', raising=False)
    monkeypatch.delenv('FOLDERS_TABLE', raising=False)
    return VideoStore(client=client)


class TestAddVideo:
    """Tests for VideoStore.add_video()"""

    @pytest.mark.unit
    def test_returns_new_id(self, store, client):
        client.table.return_value.insert.return_value.execute.return_value = result([{'id': 42}])

        assert store.add_video({'title': 'x'}) == '42'
        client.table.assert_called_with('videos')
        client.table.return_value.insert.assert_called_once_with({'title': 'x'})

    @pytest.mark.unit
    def test_raises_without_data(self, store, client):
        client.table.return_value.insert.return_value.execute.return_value = result([])

        with pytest.raises(RuntimeError):
            store.add_video({'title': 'x'})


class TestReads:
    """Tests for VideoStore read helpers"""

    @pytest.mark.unit
    def test_get_video(self, store, client):
        chain = client.table.return_value.select.return_value.eq.return_value.limit.return_value
        chain.execute.return_value = result([{'id': 'v1'}])

        assert store.get_video('v1') == {'id': 'v1'}
        client.table.return_value.select.return_value.eq.assert_called_once_with('id', 'v1')

    @pytest.mark.unit
    def test_get_missing_video(self, store, client):
        chain = client.table.return_value.select.return_value.eq.return_value.limit.return_value
        chain.execute.return_value = result([])

        assert store.get_video('nope') is None

    @pytest.mark.unit
    def test_list_videos_handles_none(self, store, client):
        client.table.return_value.select.return_value.execute.return_value = result(None)
        assert store.list_videos() == []


class TestFolders:
    """Tests for VideoStore folder helpers"""

    @pytest.mark.unit
    def test_find_folder_case_insensitive_contains(self, store, client):
        client.table.return_value.select.return_value.execute.return_value = result([
            {'id': 1, 'name': 'Recipes'},
            {'id': 2, 'name': 'My instagram saves'},
        ])

        assert store.find_folder('Instagram') == '2'

    @pytest.mark.unit
    def test_find_folder_last_match_wins(self, store, client):
        client.table.return_value.select.return_value.execute.return_value = result([
            {'id': 1, 'name': 'Instagram'},
            {'id': 2, 'name': 'Instagram old'},
        ])

        assert store.find_folder('instagram') == '2'

    @pytest.mark.unit
    def test_find_or_create_creates(self, store, client):
        client.table.return_value.select.return_value.execute.return_value = result([])
        client.table.return_value.insert.return_value.execute.return_value = result([{'id': 'new'}])

        assert store.find_or_create_folder('Instagram') == 'new'
        inserted = client.table.return_value.insert.call_args.args[0]
        assert inserted['name'] == 'Instagram'
        assert 'created_at' in inserted

    @pytest.mark.unit
    def test_find_or_create_reuses(self, store, client):
        client.table.return_value.select.return_value.execute.return_value = result([{'id': 7, 'name': 'Instagram'}])

        assert store.find_or_create_folder('Instagram') == '7'
        client.table.return_value.insert.assert_not_called()


class TestMoveVideos:
    """Tests for VideoStore.move_videos()"""

    @pytest.mark.unit
    def test_batched_update(self, store, client):
        assert store.move_videos(['a', 'b'], 'f1') == 2

        update = client.table.return_value.update
        assert update.call_count == 1
        assert update.call_args.args[0]['folder_id'] == 'f1'
        update.return_value.in_.assert_called_once_with('id', ['a', 'b'])

    @pytest.mark.unit
    def test_empty_is_noop(self, store, client):
        assert store.move_videos([], 'f1') == 0
        client.table.return_value.update.assert_not_called()

from unittest.mock import AsyncMock, patch

import pytest

from albumsync.config import DEFAULT_CONFIG
from albumsync.downloader import DownloadReport
from albumsync.syncer import AlbumSync
from conftest import api_item, write_sidecar


@pytest.fixture
def syncer(tmp_path, catalog):
    config = dict(DEFAULT_CONFIG)
    config.update({
        "mediaItemsDir": str(tmp_path / "images"),
        "takeoutsDir": str(tmp_path / "takeouts"),
        "localImportDir": str(tmp_path / "ready"),
    })
    return AlbumSync(config, catalog=catalog, exif_reader=lambda path: {})


def test_unknown_takeout_is_none(syncer):
    assert syncer.import_takeout("missing") is None


@patch("albumsync.syncer.gapi.get_album_by_title", return_value=None)
def test_unknown_album_is_none(mock_album, syncer):
    syncer.add_takeout("t1", "Trip", "Trip", "trip")
    assert syncer.import_takeout("t1") is None


@patch("albumsync.syncer.gapi.list_album_media_items")
@patch("albumsync.syncer.gapi.get_album_by_title")
def test_takeout_import_downloads_new_items(mock_album, mock_list, syncer, tmp_path, catalog):
    mock_album.return_value = {"id": "album1", "title": "Trip"}
    mock_list.return_value = [api_item("id00aa", "a.jpg")]
    write_sidecar(tmp_path / "takeouts" / "trip", "a.jpg", people=("Ann",))
    syncer.add_takeout("t1", "Trip", "Trip", "trip")

    def fake_ensure(items, overwrite=False):
        for item in items:
            item.file_path = f"/images/{item.id}.jpg"
        return DownloadReport(downloaded=list(items))

    with patch("albumsync.syncer.Downloader.ensure_bytes_local", new=AsyncMock(side_effect=fake_ensure)):
        result = syncer.import_takeout("t1")

    assert [i.id for i in result.added] == ["id00aa"]
    assert catalog.get_media_item("id00aa").file_path == "/images/id00aa.jpg"


def test_redownload_unknown_item(syncer):
    assert syncer.redownload_media_item("nope") is None


def test_local_folder_import_and_listing(syncer, tmp_path, catalog):
    folder = tmp_path / "ready" / "batch1"
    folder.mkdir(parents=True)
    (folder / "x.png").write_bytes(b"png")

    assert syncer.list_import_folders() == ["batch1"]
    items = syncer.import_local_folder("batch1")

    assert len(items) == 1
    assert catalog.get_media_item(items[0].id).album_id is None


def test_list_takeouts_sorted_by_id(syncer):
    syncer.add_takeout("t2", "Beach", "Beach 2022", "beach")
    syncer.add_takeout("t1", "Trip", "Trip", "trip")
    assert [(t.id, t.album_name) for t in syncer.list_takeouts()] == [("t1", "Trip"), ("t2", "Beach 2022")]


@patch("albumsync.syncer.convert_heic_folder")
def test_heic_folders_resolve_under_import_dir(mock_convert, syncer, tmp_path):
    syncer.convert_heic_folder("phone", "batch2")
    mock_convert.assert_called_once_with(tmp_path / "ready" / "phone", tmp_path / "ready" / "batch2")


def test_auth_paths_come_from_config(tmp_path, catalog):
    config = dict(DEFAULT_CONFIG)
    config.update({"credentialsFile": str(tmp_path / "secrets.json"), "tokenFile": str(tmp_path / "tok")})
    syncer = AlbumSync(config, catalog=catalog)
    assert syncer.auth_manager.token_file == tmp_path / "tok"
    assert syncer.auth_manager.credentials_file == tmp_path / "secrets.json"

from unittest.mock import MagicMock, patch

import pytest

from albumsync import google_photos_api as gapi


def response(status=200, payload=None, text="ok"):
    resp = MagicMock(status_code=status, text=text)
    resp.json.return_value = payload or {}
    return resp


@pytest.fixture
def creds():
    return MagicMock(valid=True, token="tok")


@patch("albumsync.google_photos_api.requests.post")
def test_album_listing_follows_pages(mock_post, creds):
    mock_post.side_effect = [
        response(payload={"mediaItems": [{"id": "1"}], "nextPageToken": "p2"}),
        response(payload={"mediaItems": [{"id": "2"}]}),
    ]

    items = gapi.list_album_media_items(creds, "album1")

    assert [i["id"] for i in items] == ["1", "2"]
    assert mock_post.call_args.kwargs["json"]["pageToken"] == "p2"


@patch("albumsync.google_photos_api.requests.post")
def test_album_listing_error_propagates(mock_post, creds):
    mock_post.return_value = response(status=403, text="forbidden")
    with pytest.raises(gapi.GooglePhotosError):
        gapi.list_album_media_items(creds, "album1")


@patch("albumsync.google_photos_api.requests.get")
def test_get_album_by_title(mock_get, creds):
    mock_get.return_value = response(payload={"albums": [{"id": "a1", "title": "Trip"}]})
    assert gapi.get_album_by_title(creds, "Trip")["id"] == "a1"
    assert gapi.get_album_by_title(creds, "Nope") is None


@patch("albumsync.google_photos_api.requests.get")
def test_batch_get_skips_failed_results(mock_get, creds):
    mock_get.return_value = response(payload={"mediaItemResults": [
        {"mediaItem": {"id": "1", "baseUrl": "u"}},
        {"mediaItemId": "2", "status": {"code": 5}},
    ]})

    items = gapi.batch_get_media_items(creds, ["1", "2"])

    assert items == [{"id": "1", "baseUrl": "u"}]
    assert mock_get.call_args.kwargs["params"] == {"mediaItemIds": ["1", "2"]}


def test_batch_get_enforces_limit(creds):
    with pytest.raises(ValueError):
        gapi.batch_get_media_items(creds, [str(i) for i in range(gapi.BATCH_GET_LIMIT + 1)])


@patch("albumsync.google_photos_api.requests.post")
def test_upload_returns_new_id(mock_post, creds, tmp_path):
    path = tmp_path / "a.jpg"
    path.write_bytes(b"jpeg")
    mock_post.side_effect = [
        response(text="upload-token"),
        response(payload={"newMediaItemResults": [{"status": {"message": "Success"}, "mediaItem": {"id": "new1"}}]}),
    ]

    assert gapi.upload_file_to_photos(creds, path) == "new1"
    assert mock_post.call_args.kwargs["json"]["newMediaItems"][0]["simpleMediaItem"]["uploadToken"] == "upload-token"

from pathlib import Path
from typing import List, Optional

import requests
from google.auth.transport.requests import Request
from loguru import logger

from albumsync.config import ALBUM_LIST_PAGE_SIZE, ALBUM_PAGE_SIZE, BATCH_GET_LIMIT

API_ROOT = "https://photoslibrary.googleapis.com/v1"


class GooglePhotosError(Exception):
    """A Google Photos request that did not return 200."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _check(resp: requests.Response, what: str) -> dict:
    if resp.status_code != 200:
        logger.error(f"Error {what}: {resp.status_code} {resp.text}")
        raise GooglePhotosError(resp.status_code, resp.text)
    return resp.json()


def get_headers(creds):
    """
    Return headers for authorized requests to Google Photos.
    """
    if not creds.valid:
        creds.refresh(Request())
    return {
        "Authorization": f"Bearer {creds.token}",
        "Content-Type": "application/json"
    }


def list_albums(creds) -> List[dict]:
    """
    List all albums (paginated). Returns a list of album dicts.
    """
    url = f"{API_ROOT}/albums"
    headers = get_headers(creds)
    albums = []
    page_token = None

    while True:
        params = {"pageSize": ALBUM_LIST_PAGE_SIZE}
        if page_token:
            params["pageToken"] = page_token

        data = _check(requests.get(url, headers=headers, params=params), "listing albums")
        albums.extend(data.get("albums", []))

        page_token = data.get("nextPageToken")
        if not page_token:
            break

    return albums


def get_album_by_title(creds, title: str) -> Optional[dict]:
    for album in list_albums(creds):
        if album.get("title") == title:
            return album
    return None


def list_album_media_items(creds, album_id: str) -> List[dict]:
    """
    Every mediaItem in an album, following mediaItems:search pagination.
    """
    url = f"{API_ROOT}/mediaItems:search"
    body = {"albumId": album_id, "pageSize": ALBUM_PAGE_SIZE}
    items = []

    while True:
        data = _check(
            requests.post(url, headers=get_headers(creds), json=body),
            f"searching album {album_id}",
        )
        items.extend(data.get("mediaItems", []))

        next_page_token = data.get("nextPageToken")
        if not next_page_token:
            break
        body["pageToken"] = next_page_token

    return items


def batch_get_media_items(creds, media_ids: List[str]) -> List[dict]:
    """
    Fetch fresh metadata (including baseUrl) for up to BATCH_GET_LIMIT ids.
    Results the API reports as failed are left out.
    """
    if len(media_ids) > BATCH_GET_LIMIT:
        raise ValueError(f"batchGet accepts at most {BATCH_GET_LIMIT} ids, got {len(media_ids)}")
    if not media_ids:
        return []

    url = f"{API_ROOT}/mediaItems:batchGet"
    data = _check(
        requests.get(url, headers=get_headers(creds), params={"mediaItemIds": media_ids}),
        "fetching media item metadata",
    )

    items = []
    for result in data.get("mediaItemResults", []):
        if "mediaItem" in result:
            items.append(result["mediaItem"])
        else:
            logger.warning(f"batchGet failed for {result.get('mediaItemId')}: {result.get('status')}")
    return items


def upload_file_to_photos(creds, file_path: Path, description: str = "Uploaded via albumsync"):
    """
    Upload a local file (raw bytes) to Google Photos, then call batchCreate.
    Return the new mediaItem ID or None on error.
    """
    # 1) Upload raw bytes
    headers = {
        "Authorization": f"Bearer {creds.token}",
        "Content-type": "application/octet-stream",
        "X-Goog-Upload-File-Name": file_path.name,
        "X-Goog-Upload-Protocol": "raw"
    }

    with open(file_path, "rb") as f:
        resp = requests.post(f"{API_ROOT}/uploads", headers=headers, data=f.read())
    if resp.status_code != 200 or not resp.text:
        logger.error(f"Upload failed: {resp.status_code} {resp.text}")
        return None

    upload_token = resp.text

    # 2) batchCreate
    create_body = {
        "newMediaItems": [
            {
                "description": description,
                "simpleMediaItem": {
                    "uploadToken": upload_token
                }
            }
        ]
    }
    resp2 = requests.post(f"{API_ROOT}/mediaItems:batchCreate", headers=get_headers(creds), json=create_body)
    if resp2.status_code != 200:
        logger.error(f"batchCreate failed: {resp2.status_code} {resp2.text}")
        return None

    new_items = resp2.json().get("newMediaItemResults", [])
    if not new_items:
        logger.error("No media items created.")
        return None

    new_item = new_items[0]
    status = new_item.get("status", {})
    # batchCreate omits "code" on success
    if status.get("code", 0) == 0 and "mediaItem" in new_item:
        return new_item["mediaItem"]["id"]

    logger.error(f"Upload error: {status.get('message', 'Unknown')}")
    return None

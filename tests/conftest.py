import json

import pytest

from albumsync.content_store import ContentStore
from albumsync.keywords import KeywordManager
from albumsync.local_store import Catalog
from albumsync.reconciler import Reconciler


def api_item(media_id, filename, width="4032", height="3024", creation_time="2023-05-01T10:00:00Z"):
    return {
        "id": media_id,
        "filename": filename,
        "productUrl": f"https://photos.google.com/lr/photo/{media_id}",
        "baseUrl": f"https://lh3.googleusercontent.com/{media_id}",
        "mimeType": "image/jpeg",
        "mediaMetadata": {"creationTime": creation_time, "width": width, "height": height},
    }


def write_sidecar(folder, filename, people=(), description="", geo=None):
    data = {
        "title": filename,
        "description": description,
        "geoData": geo or {
            "latitude": 0.0, "longitude": 0.0, "altitude": 0.0,
            "latitudeSpan": 0.0, "longitudeSpan": 0.0,
        },
    }
    if people:
        data["people"] = [{"name": name} for name in people]
    folder.mkdir(parents=True, exist_ok=True)
    (folder / f"{filename}.json").write_text(json.dumps(data))


@pytest.fixture
def catalog(tmp_path):
    return Catalog(tmp_path / "catalog.json")


@pytest.fixture
def store(tmp_path):
    return ContentStore(tmp_path / "images")


@pytest.fixture
def reconciler(catalog, store):
    return Reconciler(catalog, store, KeywordManager(catalog), exif_reader=lambda path: {})

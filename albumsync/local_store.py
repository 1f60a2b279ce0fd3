import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from loguru import logger

from albumsync.config import CATALOG_FILE
from albumsync.models import Keyword, KeywordNode, MediaItem, Takeout

COLLECTIONS = ("mediaItems", "deletedMediaItems", "keywords", "keywordNodes", "takeouts")


class Catalog:
    """
    JSON-file document store for media items, deleted items, keywords,
    keyword nodes and takeouts. Every write saves the whole file.

    Layout of catalog.json:
    {
      "mediaItems": {"<id>": {...MediaItem...}},
      "deletedMediaItems": {"<id>": {...MediaItem...}},
      "keywords": {"<keywordId>": {...}},
      "keywordNodes": {"<nodeId>": {...}},
      "takeouts": {"<id>": {...}},
      "rootNodeId": "rootKeywordNodeId"
    }
    """

    def __init__(self, path: Union[str, Path] = CATALOG_FILE):
        self.path = Path(path)
        self.data: Dict[str, dict] = self._load()

    def _load(self) -> dict:
        data = {}
        if self.path.exists():
            with open(self.path, "r") as f:
                data = json.load(f)
        for name in COLLECTIONS:
            data.setdefault(name, {})
        data.setdefault("rootNodeId", None)
        return data

    def save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self.data, f, indent=2)

    # -----------------------------
    # MEDIA ITEMS
    # -----------------------------

    def list_media_items(self) -> List[MediaItem]:
        return [MediaItem.from_dict(d) for d in self.data["mediaItems"].values()]

    def list_media_items_in_album(self, album_id: str) -> List[MediaItem]:
        return [
            MediaItem.from_dict(d)
            for d in self.data["mediaItems"].values()
            if d.get("albumId") == album_id
        ]

    def get_media_item(self, item_id: str) -> Optional[MediaItem]:
        rec = self.data["mediaItems"].get(item_id)
        return MediaItem.from_dict(rec) if rec else None

    def upsert_media_item(self, item: MediaItem):
        self.data["mediaItems"][item.id] = item.to_dict()
        self.save()

    def upsert_media_items(self, items: Iterable[MediaItem]):
        for item in items:
            self.data["mediaItems"][item.id] = item.to_dict()
        self.save()

    def delete_media_items(self, item_ids: Iterable[str]):
        changed = False
        for item_id in item_ids:
            if self.data["mediaItems"].pop(item_id, None) is not None:
                changed = True
        if changed:
            self.save()

    # -----------------------------
    # DELETED MEDIA ITEMS
    # -----------------------------

    def add_deleted_media_item(self, item: MediaItem):
        self.data["deletedMediaItems"][item.id] = item.to_dict()
        self.save()

    def list_deleted_media_items(self) -> List[MediaItem]:
        return [MediaItem.from_dict(d) for d in self.data["deletedMediaItems"].values()]

    def remove_deleted_media_item(self, item_id: str):
        if self.data["deletedMediaItems"].pop(item_id, None) is not None:
            self.save()

    def clear_deleted_media_items(self):
        self.data["deletedMediaItems"] = {}
        self.save()

    # -----------------------------
    # KEYWORDS
    # -----------------------------

    def list_keywords(self) -> List[Keyword]:
        return [Keyword.from_dict(d) for d in self.data["keywords"].values()]

    def get_keyword(self, keyword_id: str) -> Optional[Keyword]:
        rec = self.data["keywords"].get(keyword_id)
        return Keyword.from_dict(rec) if rec else None

    def upsert_keyword(self, keyword: Keyword):
        self.data["keywords"][keyword.keyword_id] = keyword.to_dict()
        self.save()

    def list_keyword_nodes(self) -> List[KeywordNode]:
        return [KeywordNode.from_dict(d) for d in self.data["keywordNodes"].values()]

    def get_keyword_node(self, node_id: str) -> Optional[KeywordNode]:
        rec = self.data["keywordNodes"].get(node_id)
        return KeywordNode.from_dict(rec) if rec else None

    def upsert_keyword_node(self, node: KeywordNode):
        self.data["keywordNodes"][node.node_id] = node.to_dict()
        self.save()

    def get_root_node_id(self) -> Optional[str]:
        return self.data["rootNodeId"]

    def set_root_node_id(self, node_id: str):
        self.data["rootNodeId"] = node_id
        self.save()

    # -----------------------------
    # TAKEOUTS
    # -----------------------------

    def add_takeout(self, takeout: Takeout):
        self.data["takeouts"][takeout.id] = takeout.to_dict()
        self.save()

    def get_takeout(self, takeout_id: str) -> Optional[Takeout]:
        rec = self.data["takeouts"].get(takeout_id)
        return Takeout.from_dict(rec) if rec else None

    def list_takeouts(self) -> List[Takeout]:
        return [Takeout.from_dict(d) for d in self.data["takeouts"].values()]


def delete_local_files(paths: Iterable[Union[str, Path]]) -> Dict[str, str]:
    """
    Delete each file independently. Returns {path: error} for the ones that
    could not be removed; a missing or empty path is not an error.
    """
    failures = {}
    for path in paths:
        if not path:
            continue
        path = Path(path)
        if not path.exists():
            continue
        try:
            path.unlink()
            logger.info(f"Deleted local file: {path}")
        except OSError as e:
            logger.warning(f"Error deleting {path}: {e}")
            failures[str(path)] = str(e)
    return failures

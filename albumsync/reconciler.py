"""
Three-way reconciliation of a Google Photos album, its takeout sidecars and
the local catalog.

An album with no catalog rows gets a fresh import (with person keywords
minted from the sidecars). Otherwise the album's "current truth" is merged
into the catalog: changed rows are overwritten, new rows inserted, and rows
that left the album deleted once every insert/update has been written.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from loguru import logger

from albumsync.content_store import ContentStore
from albumsync.exif import read_exif_tags
from albumsync.keywords import KeywordManager
from albumsync.local_store import Catalog, delete_local_files
from albumsync.models import MediaItem, PersonKeywordResult, RemoteMediaItem
from albumsync.normalizer import normalize
from albumsync.takeout import TakeoutFolder, is_image_file

# Fields copied from the remote album / takeout; the rest is local state.
COMPARED_FIELDS = (
    "id",
    "file_name",
    "album_id",
    "remote_product_url",
    "mime_type",
    "creation_time_utc",
    "width",
    "height",
    "orientation",
    "description",
    "geo_data",
    "people",
)


def media_items_identical(a: MediaItem, b: MediaItem) -> bool:
    return all(getattr(a, name) == getattr(b, name) for name in COMPARED_FIELDS)


@dataclass
class TakeoutImportResult:
    album_id: str
    added_keyword_data: Optional[PersonKeywordResult] = None
    added: List[MediaItem] = field(default_factory=list)
    updated: List[MediaItem] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    unchanged: int = 0

    @property
    def needs_bytes(self) -> List[MediaItem]:
        return [item for item in self.added + self.updated if not item.file_path]


@dataclass
class DeleteResult:
    deleted: List[str] = field(default_factory=list)
    not_found: List[str] = field(default_factory=list)
    file_failures: Dict[str, str] = field(default_factory=dict)


class Reconciler:

    def __init__(
        self,
        catalog: Catalog,
        content_store: ContentStore,
        keyword_manager: KeywordManager,
        exif_reader: Callable[[Path], dict] = read_exif_tags,
    ):
        self.catalog = catalog
        self.content_store = content_store
        self.keyword_manager = keyword_manager
        self.exif_reader = exif_reader

    # -----------------------------
    # TAKEOUT IMPORT
    # -----------------------------

    def reconcile_album(
        self, album_id: str, remote_items: List[dict], takeout_folder: Path
    ) -> TakeoutImportResult:
        """
        Bring the catalog rows for album_id in line with the album listing
        plus its takeout sidecars.
        """
        takeout = TakeoutFolder(takeout_folder)
        existing = self.catalog.list_media_items_in_album(album_id)
        if not existing:
            return self.add_all_from_takeout(album_id, remote_items, takeout)
        return self.merge_with_catalog(album_id, remote_items, takeout, existing)

    def _matched_remote_items(self, remote_items: List[dict], takeout: TakeoutFolder):
        """(remote, sidecar) for album images whose '<filename>.json' sidecar loads."""
        for raw in remote_items:
            remote = RemoteMediaItem.from_api(raw)
            if not is_image_file(remote.filename):
                continue
            if not takeout.has_sidecar(remote.filename):
                logger.debug(f"Skipping {remote.filename}: no takeout sidecar")
                continue
            sidecar = takeout.sidecar_for(remote.filename)
            if sidecar is None:
                continue
            yield remote, sidecar

    def _exif_for(self, takeout: TakeoutFolder, file_name: str) -> Optional[dict]:
        image_path = takeout.image_path_for(file_name)
        if image_path is None:
            return None
        return self.exif_reader(image_path)

    def build_current_truth(
        self, album_id: str, remote_items: List[dict], takeout: TakeoutFolder
    ) -> List[MediaItem]:
        items = []
        for remote, sidecar in self._matched_remote_items(remote_items, takeout):
            exif = self._exif_for(takeout, remote.filename)
            items.append(normalize(remote, sidecar, exif, album_id=album_id))
        return items

    def add_all_from_takeout(
        self, album_id: str, remote_items: List[dict], takeout: TakeoutFolder
    ) -> TakeoutImportResult:
        logger.info(f"Fresh import of album {album_id}")

        staged = []
        person_names = set()
        for remote, sidecar in self._matched_remote_items(remote_items, takeout):
            person_names.update(sidecar.person_names())
            staged.append((remote, sidecar))

        result = TakeoutImportResult(album_id=album_id)
        if person_names:
            result.added_keyword_data = self.keyword_manager.ensure_person_keywords(person_names)
        node_id_by_name = result.added_keyword_data.node_id_by_name if result.added_keyword_data else {}

        for remote, sidecar in staged:
            exif = self._exif_for(takeout, remote.filename)
            item = normalize(remote, sidecar, exif, album_id=album_id)
            item.keyword_tag_ids = [node_id_by_name[name] for name in sidecar.person_names()]
            result.added.append(item)

        self.catalog.upsert_media_items(result.added)
        logger.info(f"Added {len(result.added)} media items from takeout")
        return result

    def merge_with_catalog(
        self,
        album_id: str,
        remote_items: List[dict],
        takeout: TakeoutFolder,
        existing: List[MediaItem],
    ) -> TakeoutImportResult:
        current_truth = self.build_current_truth(album_id, remote_items, takeout)
        return self.merge_items(album_id, current_truth, existing)

    def merge_items(
        self, album_id: str, current_truth: List[MediaItem], existing: List[MediaItem]
    ) -> TakeoutImportResult:
        result = TakeoutImportResult(album_id=album_id)
        existing_by_id = {item.id: item for item in existing}
        truth_by_id = {item.id: item for item in current_truth}

        for item in current_truth:
            in_catalog = existing_by_id.get(item.id)
            if in_catalog is None:
                self.catalog.upsert_media_item(item)
                result.added.append(item)
            elif not media_items_identical(item, in_catalog):
                # local state survives an update
                item.file_path = in_catalog.file_path
                item.keyword_tag_ids = list(in_catalog.keyword_tag_ids)
                self.catalog.upsert_media_item(item)
                result.updated.append(item)
            else:
                result.unchanged += 1

        result.deleted = [item.id for item in existing if item.id not in truth_by_id]
        if result.deleted:
            self.catalog.delete_media_items(result.deleted)

        logger.info(
            f"Merged album {album_id}: {len(result.added)} added, {len(result.updated)} updated, "
            f"{len(result.deleted)} deleted, {result.unchanged} unchanged"
        )
        return result

    # -----------------------------
    # USER DELETE
    # -----------------------------

    def delete_media_items(self, item_ids: List[str]) -> DeleteResult:
        """
        Archive each item to the deleted-items collection, drop the catalog
        rows, then remove the files. File errors are collected per path.
        """
        result = DeleteResult()
        file_paths = []
        for item_id in item_ids:
            item = self.catalog.get_media_item(item_id)
            if item is None:
                logger.warning(f"Cannot delete {item_id}: not in catalog")
                result.not_found.append(item_id)
                continue
            self.catalog.add_deleted_media_item(item)
            file_paths.append(item.file_path)
            result.deleted.append(item_id)

        self.catalog.delete_media_items(result.deleted)
        result.file_failures = delete_local_files(file_paths)
        return result

import asyncio
from pathlib import Path
from typing import List, Optional

from loguru import logger

from albumsync import google_photos_api as gapi
from albumsync.auth import AuthManager
from albumsync.config import load_user_config
from albumsync.content_store import ContentStore
from albumsync.downloader import DownloadReport, Downloader
from albumsync.exif import read_exif_tags
from albumsync.heic import HeicConversionReport, convert_heic_folder
from albumsync.keywords import KeywordManager
from albumsync.local_import import LocalFolderImporter, list_import_folders
from albumsync.local_store import Catalog
from albumsync.models import MediaItem, Takeout
from albumsync.reconciler import DeleteResult, Reconciler, TakeoutImportResult


class AlbumSync:
    """
    Main class orchestrating the import pipeline:
     - takeout import (fresh or merged against the catalog)
     - byte downloads into the sharded content store
     - local folder import
     - user deletes, redownloads and uploads
    """

    def __init__(self, config: dict = None, catalog: Catalog = None, exif_reader=read_exif_tags):
        self.config = config if config is not None else load_user_config()
        self.auth_manager = AuthManager.from_config(self.config)
        self.creds = None

        self.catalog = catalog if catalog is not None else Catalog()
        self.content_store = ContentStore(self.config["mediaItemsDir"])
        self.keyword_manager = KeywordManager(self.catalog)
        self.reconciler = Reconciler(self.catalog, self.content_store, self.keyword_manager, exif_reader)
        self.local_importer = LocalFolderImporter(self.catalog, self.content_store, exif_reader)

    def authenticate(self):
        self.creds = self.auth_manager.authenticate()

    def _downloader(self) -> Downloader:
        return Downloader(
            self.content_store,
            creds=self.creds,
            batch_size=self.config["batchGetLimit"],
            concurrency=self.config["downloadConcurrency"],
        )

    # -----------------------------
    # 1) TAKEOUTS
    # -----------------------------

    def add_takeout(self, takeout_id: str, label: str, album_name: str, path: str) -> str:
        self.catalog.add_takeout(Takeout(takeout_id, label, album_name, path))
        return takeout_id

    def import_takeout(self, takeout_id: str) -> Optional[TakeoutImportResult]:
        takeout = self.catalog.get_takeout(takeout_id)
        if takeout is None:
            logger.warning(f"Takeout '{takeout_id}' not found.")
            return None
        return self.import_from_takeout(takeout.album_name, takeout.path)

    def list_takeouts(self) -> List[Takeout]:
        return sorted(self.catalog.list_takeouts(), key=lambda t: t.id)

    def import_from_takeout(self, album_name: str, takeout_folder: str) -> Optional[TakeoutImportResult]:
        """
        Reconcile the named album with the catalog using the takeout's
        sidecars, then download bytes for the items that need them.
        """
        album = gapi.get_album_by_title(self.creds, album_name)
        if album is None:
            logger.warning(f"Album '{album_name}' not found in Google Photos.")
            return None

        album_id = album["id"]
        logger.info(f"Importing album '{album_name}' (ID={album_id}) from takeout '{takeout_folder}'")
        remote_items = gapi.list_album_media_items(self.creds, album_id)

        folder = Path(self.config["takeoutsDir"]) / takeout_folder
        result = self.reconciler.reconcile_album(album_id, remote_items, folder)

        if result.needs_bytes:
            self.download(result.needs_bytes)
        return result

    # -----------------------------
    # 2) DOWNLOADS
    # -----------------------------

    def download(self, items: List[MediaItem], overwrite: bool = False) -> DownloadReport:
        report = asyncio.run(self._downloader().ensure_bytes_local(items, overwrite=overwrite))
        self._record_file_paths(report)
        for failure in report.failures:
            logger.warning(f"Not downloaded: {failure.item_id} ({failure.reason})")
        return report

    def download_missing(self) -> DownloadReport:
        """Download every remote catalog item whose bytes are not local yet."""
        missing = [
            item for item in self.catalog.list_media_items()
            if item.album_id and not (item.file_path and Path(item.file_path).exists())
        ]
        logger.info(f"{len(missing)} media items missing local bytes")
        return self.download(missing)

    def redownload_media_item(self, item_id: str) -> Optional[DownloadReport]:
        item = self.catalog.get_media_item(item_id)
        if item is None:
            logger.warning(f"Media item '{item_id}' not found.")
            return None
        report = asyncio.run(self._downloader().redownload(item))
        self._record_file_paths(report)
        return report

    def _record_file_paths(self, report: DownloadReport):
        changed = []
        for item in report.items:
            stored = self.catalog.get_media_item(item.id)
            if stored is not None and stored.file_path != item.file_path:
                stored.file_path = item.file_path
                changed.append(stored)
        if changed:
            self.catalog.upsert_media_items(changed)

    # -----------------------------
    # 3) LOCAL FOLDERS / UPLOADS / DELETES
    # -----------------------------

    def list_import_folders(self) -> List[str]:
        return list_import_folders(self.config["localImportDir"])

    def import_local_folder(self, folder_name: str) -> List[MediaItem]:
        return self.local_importer.import_folder(Path(self.config["localImportDir"]) / folder_name)

    def convert_heic_folder(self, folder_name: str, output_name: str) -> HeicConversionReport:
        base = Path(self.config["localImportDir"])
        return convert_heic_folder(base / folder_name, base / output_name)

    def upload_local_file(self, file_path: Path, description: str = "Uploaded via albumsync") -> Optional[str]:
        return gapi.upload_file_to_photos(self.creds, Path(file_path), description)

    def delete_media_items(self, item_ids: List[str]) -> DeleteResult:
        return self.reconciler.delete_media_items(item_ids)

import os
import shutil
from pathlib import Path
from typing import Callable, List, Union

from loguru import logger

from albumsync.content_store import ContentStore
from albumsync.exif import read_exif_tags
from albumsync.local_store import Catalog
from albumsync.models import MediaItem
from albumsync.normalizer import normalize
from albumsync.takeout import is_image_file


def list_import_folders(base_dir: Union[str, Path]) -> List[str]:
    """Names of the sub-folders waiting in base_dir. OS errors propagate."""
    real_dir = os.path.realpath(base_dir)
    with os.scandir(real_dir) as entries:
        return sorted(entry.name for entry in entries if entry.is_dir())


def list_image_files(folder: Union[str, Path]) -> List[Path]:
    """Image files directly under folder (no recursion). OS errors propagate."""
    with os.scandir(folder) as entries:
        return sorted(
            Path(entry.path) for entry in entries
            if entry.is_file() and is_image_file(entry.name)
        )


class LocalFolderImporter:
    """
    Imports a folder of images that never went through Google Photos.
    EXIF is the only metadata source; every call adds new items.
    """

    def __init__(
        self,
        catalog: Catalog,
        content_store: ContentStore,
        exif_reader: Callable[[Path], dict] = read_exif_tags,
    ):
        self.catalog = catalog
        self.content_store = content_store
        self.exif_reader = exif_reader

    def import_folder(self, folder: Union[str, Path]) -> List[MediaItem]:
        folder = Path(folder)
        image_paths = list_image_files(folder)
        logger.info(f"Importing {len(image_paths)} images from {folder}")

        imported = []
        for source in image_paths:
            exif = self.exif_reader(source)
            item = normalize(None, None, exif, file_name=source.name)
            where = self.content_store.destination(item.id, item.file_name)
            item.file_path = str(where)

            logger.debug(f"Copying {source} -> {where}")
            shutil.copyfile(source, where)
            self.catalog.upsert_media_item(item)
            imported.append(item)

        return imported

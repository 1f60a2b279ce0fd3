"""
Reading an unpacked takeout archive: one <original file name>.json sidecar
per media file, possibly spread over several sub-folders.
"""

import json
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from loguru import logger

from albumsync.models import TakeoutSidecar

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".heic", ".heif", ".tif", ".tiff", ".webp"}


def is_image_file(file_name: str) -> bool:
    return Path(file_name).suffix.lower() in IMAGE_EXTENSIONS


def _walk_files(folder: Path):
    for root, dirs, files in os.walk(folder):
        for fname in files:
            yield Path(root) / fname


def get_json_file_paths(folder: Union[str, Path]) -> List[Path]:
    return sorted(p for p in _walk_files(Path(folder)) if p.suffix.lower() == ".json")


def get_image_file_paths(folder: Union[str, Path]) -> List[Path]:
    return sorted(p for p in _walk_files(Path(folder)) if is_image_file(p.name))


def load_sidecar(path: Union[str, Path]) -> TakeoutSidecar:
    """Parse one sidecar. ValueError if it is not a JSON object."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return TakeoutSidecar.from_json(data)


class TakeoutFolder:
    """Index of a takeout folder's sidecars and images by media file name."""

    def __init__(self, folder: Union[str, Path]):
        self.folder = Path(folder)
        if not self.folder.is_dir():
            raise FileNotFoundError(f"Takeout folder not found: {self.folder}")

        # "IMG_1.jpg.json" -> "IMG_1.jpg"; exact names only, last one found wins
        self.sidecar_paths: Dict[str, Path] = {}
        for path in get_json_file_paths(self.folder):
            name = path.name[:-len(".json")]
            if name in self.sidecar_paths:
                logger.warning(f"Duplicate sidecar for {name}: {path} replaces {self.sidecar_paths[name]}")
            self.sidecar_paths[name] = path
        self.image_paths: Dict[str, Path] = {p.name: p for p in get_image_file_paths(self.folder)}
        logger.info(
            f"Takeout {self.folder}: {len(self.sidecar_paths)} sidecars, {len(self.image_paths)} images"
        )

    def has_sidecar(self, file_name: str) -> bool:
        return file_name in self.sidecar_paths

    def sidecar_for(self, file_name: str) -> Optional[TakeoutSidecar]:
        path = self.sidecar_paths.get(file_name)
        if path is None:
            logger.debug(f"No sidecar for {file_name}")
            return None
        try:
            return load_sidecar(path)
        except (ValueError, OSError) as e:
            logger.warning(f"Unreadable sidecar {path}: {e}")
            return None

    def image_path_for(self, file_name: str) -> Optional[Path]:
        return self.image_paths.get(file_name)

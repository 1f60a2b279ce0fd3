from pathlib import Path
from typing import Dict, Union

from loguru import logger


class ContentStore:
    """
    Sharded on-disk layout for media bytes.

    An item with id '...7a' lives in base_dir/7/a/<id><ext>. Shard
    directories are created on demand; `existing_dirs` memoizes the ones
    already seen so repeated lookups skip the filesystem.
    """

    def __init__(self, base_dir: Union[str, Path], existing_dirs: Dict[Path, bool] = None):
        self.base_dir = Path(base_dir)
        self.existing_dirs = existing_dirs if existing_dirs is not None else {}

    def shard_directory(self, item_id: str) -> Path:
        if len(item_id) < 2:
            raise ValueError(f"Item id too short to shard: {item_id!r}")
        return self.base_dir / item_id[-2] / item_id[-1]

    def resolve_path(self, item_id: str) -> Path:
        """Return the shard directory for item_id, creating it if absent."""
        target = self.shard_directory(item_id)
        if self.existing_dirs.get(target):
            return target
        if not target.is_dir():
            logger.debug(f"Creating shard directory {target}")
            target.mkdir(parents=True, exist_ok=True)
        self.existing_dirs[target] = True
        return target

    @staticmethod
    def file_name_for(item_id: str, original_file_name: str) -> str:
        return item_id + Path(original_file_name).suffix

    def destination(self, item_id: str, original_file_name: str) -> Path:
        return self.resolve_path(item_id) / self.file_name_for(item_id, original_file_name)

import json
import shutil
import subprocess
from pathlib import Path
from typing import Union

from loguru import logger


def read_exif_tags(file_path: Union[str, Path]) -> dict:
    """
    Return the exiftool tag bag for a file, with numeric values (-n) so GPS
    coordinates and Orientation come back as numbers. Empty dict on failure.
    """
    if not shutil.which("exiftool"):
        logger.error("exiftool is not installed or not in PATH")
        return {}

    cmd = ["exiftool", "-j", "-n", str(file_path)]
    result = subprocess.run(cmd, capture_output=True, text=True)
    if result.returncode != 0:
        logger.warning(f"Error reading EXIF from {file_path}: {result.stderr.strip()}")
        return {}

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        logger.warning(f"Error parsing EXIF for {file_path}: {e}")
        return {}
    return data[0] if data else {}


def copy_exif_tags(source_path: Union[str, Path], target_path: Union[str, Path]) -> bool:
    """Copy every tag exiftool can write from source_path onto target_path."""
    if not shutil.which("exiftool"):
        logger.error("exiftool is not installed or not in PATH")
        return False

    cmd = ["exiftool", "-overwrite_original", "-TagsFromFile", str(source_path), str(target_path)]
    result = subprocess.run(cmd, capture_output=True, text=True)
    if result.returncode != 0:
        logger.warning(f"Error copying EXIF {source_path} -> {target_path}: {result.stderr.strip()}")
        return False
    return True

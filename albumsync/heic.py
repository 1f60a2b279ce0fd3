"""
HEIC -> JPEG conversion for folders headed to local import. Decoding is
done by pillow_heif through Pillow's opener; EXIF is carried over by
exiftool afterwards since the JPEG encoder drops most of it.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Union

from loguru import logger
from PIL import Image
from pillow_heif import register_heif_opener

from albumsync.exif import copy_exif_tags

register_heif_opener()

HEIC_EXTENSIONS = {".heic"}
JPEG_QUALITY = 95


@dataclass
class HeicConversionReport:
    converted: List[Path] = field(default_factory=list)
    failed: List[Path] = field(default_factory=list)


def list_heic_files(folder: Union[str, Path]) -> List[Path]:
    with os.scandir(folder) as entries:
        return sorted(
            Path(entry.path) for entry in entries
            if entry.is_file() and Path(entry.name).suffix.lower() in HEIC_EXTENSIONS
        )


def convert_heic_file(input_path: Path, output_path: Path):
    with Image.open(input_path) as im:
        im.convert("RGB").save(output_path, "JPEG", quality=JPEG_QUALITY)


def convert_heic_folder(
    input_folder: Union[str, Path],
    output_folder: Union[str, Path],
    copy_tags: Callable[[Path, Path], bool] = copy_exif_tags,
) -> HeicConversionReport:
    """
    Convert each .heic directly under input_folder to <stem>.jpg in
    output_folder. A file that can't be decoded or written is recorded as
    failed and the rest still run; a missing input folder raises.
    """
    input_folder, output_folder = Path(input_folder), Path(output_folder)
    sources = list_heic_files(input_folder)
    output_folder.mkdir(parents=True, exist_ok=True)
    logger.info(f"Converting {len(sources)} HEIC files from {input_folder} to {output_folder}")

    report = HeicConversionReport()
    for source in sources:
        target = output_folder / f"{source.stem}.jpg"
        try:
            convert_heic_file(source, target)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not convert {source}: {e}")
            report.failed.append(source)
            continue
        if not copy_tags(source, target):
            logger.warning(f"EXIF not copied to {target}")
        report.converted.append(target)
    return report

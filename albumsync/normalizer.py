"""
Turns a remote API item, a takeout sidecar and an EXIF tag bag into one
MediaItem.

Every optional field ends up either a typed value or None: empty strings,
unparseable numbers and unreadable dates are all dropped to None.
"""

import datetime
import uuid
from datetime import timezone
from typing import Any, Optional

from loguru import logger

from albumsync.models import GeoData, MediaItem, RemoteMediaItem, TakeoutSidecar

EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"


def value_or_none(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


def to_int(value: Any) -> Optional[int]:
    """Coerce API/EXIF numbers ("4032", 4032.0) to int; None when impossible."""
    value = value_or_none(value)
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def format_utc(dt: datetime.datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_iso_time(value: Optional[str]) -> Optional[str]:
    """Normalize an ISO-8601 timestamp (e.g. the API's creationTime) to UTC."""
    value = value_or_none(value)
    if value is None:
        return None
    try:
        dt = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        logger.warning(f"Unparseable creation time {value!r}")
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return format_utc(dt)


def convert_create_date_to_iso(tags: Optional[dict]) -> Optional[str]:
    """
    Build a UTC ISO string from the EXIF CreateDate tag.

    A structured value (datetime) is rebuilt from its components and tagged
    UTC; a string must match 'yyyy:MM:dd HH:mm:ss' exactly.
    """
    create_date = (tags or {}).get("CreateDate")
    if not create_date:
        logger.debug("CreateDate not found in EXIF tags")
        return None

    if isinstance(create_date, datetime.datetime):
        dt = datetime.datetime(
            create_date.year,
            create_date.month,
            create_date.day,
            create_date.hour,
            create_date.minute,
            create_date.second,
            create_date.microsecond - create_date.microsecond % 1000,
            tzinfo=timezone.utc,
        )
        return format_utc(dt)

    try:
        dt = datetime.datetime.strptime(str(create_date), EXIF_DATE_FORMAT)
    except ValueError:
        logger.warning(f"Error converting CreateDate {create_date!r} to ISO format")
        return None
    return format_utc(dt.replace(tzinfo=timezone.utc))


def extract_geo_data(tags: Optional[dict]) -> Optional[GeoData]:
    """GeoData from EXIF GPS tags; None unless both coordinates are present."""
    tags = tags or {}
    latitude = tags.get("GPSLatitude")
    longitude = tags.get("GPSLongitude")
    if latitude is None or longitude is None:
        logger.debug("No GPS data found in EXIF tags")
        return None
    try:
        return GeoData(
            latitude=float(latitude),
            longitude=float(longitude),
            altitude=float(tags.get("GPSAltitude") or 0),
        )
    except (TypeError, ValueError):
        logger.warning(f"Unreadable GPS tags {latitude!r}, {longitude!r}")
        return None


def normalize(
    remote: Optional[RemoteMediaItem],
    sidecar: Optional[TakeoutSidecar],
    exif: Optional[dict],
    album_id: Optional[str] = None,
    file_name: Optional[str] = None,
) -> MediaItem:
    """
    Merge the available sources into a MediaItem.

    With a remote record, identity, names, URLs and dimensions come from the
    API and only orientation is read from EXIF. Without one (local import),
    a fresh id is minted and EXIF supplies everything it can. Description,
    people and geo data come from the sidecar when one is given; geo data
    falls back to EXIF only when there is neither a sidecar nor a remote item.
    """
    exif = exif or {}

    if remote is not None:
        item = MediaItem(
            id=remote.id,
            file_name=remote.filename,
            album_id=value_or_none(album_id),
            remote_product_url=value_or_none(remote.product_url),
            remote_byte_url_base=value_or_none(remote.base_url),
            mime_type=value_or_none(remote.mime_type),
            creation_time_utc=normalize_iso_time(remote.creation_time),
            width=to_int(remote.width),
            height=to_int(remote.height),
            orientation=to_int(exif.get("Orientation")),
        )
    else:
        if not file_name:
            raise ValueError("file_name is required when there is no remote item")
        item = MediaItem(
            id=str(uuid.uuid4()),
            file_name=file_name,
            album_id=value_or_none(album_id),
            mime_type=value_or_none(exif.get("MIMEType")),
            creation_time_utc=convert_create_date_to_iso(exif),
            width=to_int(exif.get("ImageWidth")),
            height=to_int(exif.get("ImageHeight")),
            orientation=to_int(exif.get("Orientation")),
        )

    if sidecar is not None:
        item.description = value_or_none(sidecar.description)
        item.geo_data = sidecar.geo_data
        item.people = sidecar.people
    elif remote is None:
        item.geo_data = extract_geo_data(exif)

    return item

"""
Fetches media bytes from Google Photos into the content store.

Items are grouped by BATCH_GET_LIMIT only so that baseUrls can be
refreshed with one batchGet per group; byte downloads are bounded
separately by a semaphore of `concurrency` slots.
"""

import asyncio
import os
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Callable, List, Optional

import aiohttp
import requests
from loguru import logger

from albumsync import google_photos_api as gapi
from albumsync.config import BATCH_GET_LIMIT, DOWNLOAD_CONCURRENCY
from albumsync.content_store import ContentStore
from albumsync.models import MediaItem

CHUNK_SIZE = 64 * 1024


@dataclass
class DownloadFailure:
    item_id: str
    reason: str


@dataclass
class DownloadReport:
    downloaded: List[MediaItem] = field(default_factory=list)
    skipped: List[MediaItem] = field(default_factory=list)
    failures: List[DownloadFailure] = field(default_factory=list)

    @property
    def downloaded_count(self) -> int:
        return len(self.downloaded)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def items(self) -> List[MediaItem]:
        """Items whose bytes are now local, with file_path populated."""
        return self.downloaded + self.skipped


def create_groups(items: List, group_size: int) -> List[List]:
    return [items[i:i + group_size] for i in range(0, len(items), group_size)]


def create_download_url(item: MediaItem) -> str:
    """baseUrl plus a size directive; '=d' (original bytes) when size is unknown."""
    if item.width is None or item.height is None:
        return f"{item.remote_byte_url_base}=d"
    return f"{item.remote_byte_url_base}=w{item.width}-h{item.height}"


class Downloader:

    def __init__(
        self,
        content_store: ContentStore,
        creds=None,
        batch_size: int = BATCH_GET_LIMIT,
        concurrency: int = DOWNLOAD_CONCURRENCY,
        fetch_metadata: Optional[Callable[[List[str]], List[dict]]] = None,
    ):
        self.content_store = content_store
        self.batch_size = batch_size
        self.concurrency = max(1, concurrency)
        self.fetch_metadata = fetch_metadata or partial(gapi.batch_get_media_items, creds)

    def destination_for(self, item: MediaItem) -> Path:
        return self.content_store.destination(item.id, item.file_name)

    async def ensure_bytes_local(
        self,
        items: List[MediaItem],
        overwrite: bool = False,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> DownloadReport:
        """
        Make sure every item's bytes are in the content store. Per-item
        failures are collected in the report; nothing here raises for them.
        """
        report = DownloadReport()
        own_session = session is None
        if own_session:
            session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=None))

        semaphore = asyncio.Semaphore(self.concurrency)
        try:
            for group in create_groups(items, self.batch_size):
                await self._download_group(session, semaphore, group, overwrite, report)
        finally:
            if own_session:
                await session.close()

        logger.info(
            f"Downloaded {report.downloaded_count}, skipped {report.skipped_count}, "
            f"failed {len(report.failures)}"
        )
        return report

    async def redownload(self, item: MediaItem, session: Optional[aiohttp.ClientSession] = None) -> DownloadReport:
        return await self.ensure_bytes_local([item], overwrite=True, session=session)

    async def _download_group(self, session, semaphore, group, overwrite, report):
        pending = []
        for item in group:
            where = self.destination_for(item)
            if where.exists() and not overwrite:
                item.file_path = str(where)
                report.skipped.append(item)
            else:
                pending.append(item)
        if not pending:
            return

        try:
            await self.refresh_metadata(pending)
        except (gapi.GooglePhotosError, requests.RequestException) as e:
            logger.warning(f"Metadata refresh failed for {len(pending)} items: {e}")
            report.failures.extend(DownloadFailure(item.id, f"metadata refresh failed: {e}") for item in pending)
            return

        async def bounded(item):
            async with semaphore:
                return await self.download_media_item(session, item)

        outcomes = await asyncio.gather(*(bounded(item) for item in pending))
        for item, error in zip(pending, outcomes):
            if error is None:
                report.downloaded.append(item)
            else:
                report.failures.append(DownloadFailure(item.id, error))

    async def refresh_metadata(self, items: List[MediaItem]):
        """Replace each item's expired baseUrl/productUrl with fresh ones."""
        by_id = {item.id: item for item in items}
        for item in items:
            item.remote_byte_url_base = None
        fresh = await asyncio.to_thread(self.fetch_metadata, list(by_id))
        for data in fresh:
            item = by_id.get(data.get("id"))
            if item is None:
                continue
            item.remote_byte_url_base = data.get("baseUrl")
            item.remote_product_url = data.get("productUrl", item.remote_product_url)

    async def download_media_item(self, session, item: MediaItem) -> Optional[str]:
        """Stream one item to its destination. Returns None or an error string."""
        if not item.remote_byte_url_base:
            logger.warning(f"No baseUrl for item {item.id}, can't download.")
            return "no baseUrl"

        where = self.destination_for(item)
        partial_path = where.with_name(where.name + ".part")
        url = create_download_url(item)
        try:
            async with session.get(url) as resp:
                resp.raise_for_status()
                with open(partial_path, "wb") as f:
                    async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                        f.write(chunk)
            os.replace(partial_path, where)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.warning(f"Download failed for {item.id}: {e!r}")
            partial_path.unlink(missing_ok=True)
            return repr(e)

        item.file_path = str(where)
        logger.debug(f"Downloaded item {item.id} -> {where}")
        return None

"""Enumerates the source bucket listing into the spool"""
import asyncio
import time
from typing import List, Optional
import structlog

from bucket_migrator.models.models import ListingPage, ObjectEntry, SpoolResult

logger = structlog.get_logger()

PROGRESS_EVERY = 1000


class ListingEnumerator:
    """
    Pages through the source listing and writes transferable keys to a spool.

    Entries of the current page are kept in a buffer that is popped from the
    end, so each page is consumed in reverse of the order the source returned it.

    A failed listing call is treated as the end of the listing. The failure is
    not raised, but `complete` flips to False so callers can tell a truncated
    listing from a finished one.
    """

    def __init__(self, source, metrics, page_delay: float = 1.0):
        """
        Args:
            source: Object with an async list_page(continuation_token) method
            metrics: Metrics instance
            page_delay: Seconds to wait before every follow-up page request
        """
        self.source = source
        self.metrics = metrics
        self.page_delay = page_delay
        self.continuation_token: Optional[str] = None
        self.buffer: List[ObjectEntry] = []
        self.complete = True
        self.last_error: Optional[BaseException] = None

    async def next_page(self) -> ListingPage:
        """
        Request the next page, continuing from the previous cursor.

        On error the page is empty and the cursor is exhausted.
        """
        try:
            page = await self.source.list_page(self.continuation_token)
        except Exception as e:
            logger.error(
                "listing.page_failed",
                continuation_token=self.continuation_token,
                error=str(e)
            )
            self.metrics.listing_errors.inc()
            self.complete = False
            self.last_error = e
            self.continuation_token = None
            self.buffer = []
            return ListingPage()

        self.continuation_token = page.continuation_token
        self.buffer = list(reversed(page.entries))

        logger.debug("listing.page", entries=len(page.entries), final=page.is_final)
        return page

    async def next_entry(self) -> Optional[ObjectEntry]:
        """ Pop the next entry, refilling the buffer from the source when it runs dry. """
        while not self.buffer and self.continuation_token is not None:
            await asyncio.sleep(self.page_delay)
            await self.next_page()

        if self.buffer:
            return self.buffer.pop()
        return None

    async def drain_to_spool(self, spool_writer) -> SpoolResult:
        """
        Walk the whole listing and write every transferable key to the spool.

        Args:
            spool_writer: Object with a write(key) method

        Returns:
            SpoolResult: How many entries were seen and spooled, and whether
            the listing finished without error
        """
        start_time = time.monotonic()
        scanned = 0
        spooled = 0

        await self.next_page()

        while True:
            entry = await self.next_entry()
            if entry is None:
                break

            scanned += 1
            self.metrics.objects_listed.inc()

            if scanned % PROGRESS_EVERY == 0:
                logger.info("listing.progress", scanned=scanned, spooled=spooled)

            if entry.is_transferable:
                spool_writer.write(entry.key)
                spooled += 1
                self.metrics.objects_spooled.inc()

        logger.info(
            "listing.finished",
            scanned=scanned,
            spooled=spooled,
            complete=self.complete,
            elapsed_seconds=round(time.monotonic() - start_time, 3)
        )

        return SpoolResult(scanned=scanned, spooled=spooled, complete=self.complete)

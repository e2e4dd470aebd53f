# src/tokenstats/application/holders.py
"""
Holder Enumerator - Distinct Holder Count from the Indexer

Pages through the indexer's token-account listing and counts distinct owners
with a positive balance. The whole listing is read on every refresh, so cost
grows linearly with the number of token accounts; HOLDER_MAX_PAGES caps it.

Files that USE this module:
- tokenstats.application.stats_service (holder_count field)
- tests.test_holders (unit tests)

Files that this module USES:
- tokenstats.adapters.providers.base (HolderIndex interface)
"""
import logging
import threading
from typing import Optional, Set

from tokenstats.adapters.providers.base import HolderIndex
from tokenstats.domain.errors import DataUnavailableError

log = logging.getLogger(__name__)


class HolderEnumerator:
    def __init__(self, index: HolderIndex, page_size: int = 1000, max_pages: Optional[int] = None):
        """
        Initialize enumerator.

        Args:
            index: Indexer to page through
            page_size: Records requested per page
            max_pages: Optional upper bound on pages read per count
        """
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        if max_pages is not None and max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        self.index = index
        self.page_size = page_size
        self.max_pages = max_pages

    def count_holders(self, mint: str, cancel: Optional[threading.Event] = None) -> int:
        """
        Count distinct owners holding a positive amount of `mint`.

        Records whose amount the indexer did not report are counted, since the
        indexer only lists accounts that hold the token.

        Args:
            mint: Token mint
            cancel: Set by the caller once it stops waiting; checked before every page

        Returns:
            Number of distinct owners

        Raises:
            DataUnavailableError: If any page fails or cancel was set; partial counts are
                never returned
        """
        owners: Set[str] = set()
        pages_read = 0
        page = 1
        while True:
            if self.max_pages is not None and page > self.max_pages:
                log.warning(
                    "Holder enumeration stopped at %d page(s); count %d may be low",
                    self.max_pages, len(owners),
                )
                break

            if cancel is not None and cancel.is_set():
                log.info("Holder enumeration abandoned after %d page(s)", pages_read)
                raise DataUnavailableError("holder index", "enumeration abandoned by caller", retryable=False)

            try:
                records = self.index.token_accounts_page(mint, page, self.page_size)
            except DataUnavailableError as e:
                log.error("Holder enumeration failed on page %d: %s", page, e)
                raise

            pages_read += 1
            for record in records:
                if not record.owner:
                    continue
                if record.amount is None or record.amount > 0:
                    owners.add(record.owner)

            if len(records) < self.page_size:
                break
            page += 1

        log.info("Counted %d holder(s) of %s across %d page(s)", len(owners), mint, pages_read)
        return len(owners)

"""
Continuation-token pagination over list and query endpoints.
"""

import logging
from typing import Any, Iterator, Optional

from .constants import HEADER_CONTINUATION
from .dispatcher import Executor, RequestDescriptor

logger = logging.getLogger(__name__)


class ListIterator:
    """
    Forward-only cursor over the pages of a list endpoint.

    The cursor starts active with no continuation token and becomes
    exhausted as soon as a page comes back without one. Once exhausted it
    never issues another request. Not safe to share between threads.
    """

    def __init__(self, executor: Executor, descriptor: RequestDescriptor):
        """
        Initialize cursor.

        Args:
            executor: Dispatcher used for every page
            descriptor: Request for the first page
        """
        self._executor = executor
        self._descriptor = descriptor
        self._continuation = ""
        self._done = False

    @property
    def done(self) -> bool:
        """True once the last page has been returned."""
        return self._done

    @property
    def continuation(self) -> str:
        """Token that will be sent with the next request."""
        return self._continuation

    def next(self) -> Optional[Any]:
        """
        Fetch the next page.

        Returns:
            Decoded page, or None once exhausted

        Raises:
            CosmosDBError: Any dispatch error; the cursor state is unchanged
        """
        if self._done:
            return None

        descriptor = self._descriptor
        if self._continuation:
            descriptor = descriptor.with_headers({HEADER_CONTINUATION: self._continuation})

        response = self._executor.execute(descriptor)

        self._continuation = response.continuation
        self._done = self._continuation == ""
        logger.debug(
            f"Fetched page of {self._descriptor.path} (more pages: {not self._done})"
        )
        return response.value

    def __iter__(self) -> Iterator[Any]:
        while not self._done:
            page = self.next()
            if page is not None:
                yield page

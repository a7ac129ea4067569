"""
Collection operations.

Collections live under ``dbs/<db>``; listing and creation sign with the
database link, and partition key ranges sign with the collection link.
"""

from .constants import RESOURCE_COLLECTIONS, RESOURCE_PARTITION_KEY_RANGES
from .dispatcher import Executor, RequestDescriptor
from .models import Collection, Collections, PartitionKeyRanges
from .options import if_match_headers, require_id
from .pagination import ListIterator


class CollectionClient:
    """Operations on the collections of one database."""

    def __init__(self, executor: Executor, database_id: str):
        self._executor = executor
        self.path = f"dbs/{database_id}"

    def _link(self, collection_id: str) -> str:
        return f"{self.path}/colls/{collection_id}"

    def create(self, collection: Collection) -> Collection:
        """Create a collection; id and partition key must be set."""
        return self._executor.execute(RequestDescriptor(
            "POST", f"{self.path}/colls", RESOURCE_COLLECTIONS, self.path, 201,
            body=collection, result_type=Collection,
        )).value

    def list(self) -> ListIterator:
        """Iterate over the collections of the database, one page at a time."""
        return ListIterator(self._executor, RequestDescriptor(
            "GET", f"{self.path}/colls", RESOURCE_COLLECTIONS, self.path, 200,
            result_type=Collections,
        ))

    def get(self, collection_id: str) -> Collection:
        link = self._link(collection_id)
        return self._executor.execute(RequestDescriptor(
            "GET", link, RESOURCE_COLLECTIONS, link, 200,
            result_type=Collection,
        )).value

    def delete(self, collection: Collection) -> None:
        """
        Delete a collection if it is unchanged since it was read.

        Raises:
            ETagRequiredError: If collection.etag is empty
        """
        headers = if_match_headers(collection.etag)
        link = self._link(require_id(collection.id))
        self._executor.execute(RequestDescriptor(
            "DELETE", link, RESOURCE_COLLECTIONS, link, 204,
            headers=headers,
        ))

    def replace(self, collection: Collection) -> Collection:
        """
        Replace a collection definition (e.g., its indexing policy).

        Raises:
            ETagRequiredError: If collection.etag is empty
        """
        headers = if_match_headers(collection.etag)
        link = self._link(require_id(collection.id))
        return self._executor.execute(RequestDescriptor(
            "PUT", link, RESOURCE_COLLECTIONS, link, 200,
            body=collection, headers=headers, result_type=Collection,
        )).value

    def partition_key_ranges(self, collection_id: str) -> PartitionKeyRanges:
        """Read the partition key ranges of a collection."""
        link = self._link(collection_id)
        return self._executor.execute(RequestDescriptor(
            "GET", f"{link}/pkranges", RESOURCE_PARTITION_KEY_RANGES, link, 200,
            result_type=PartitionKeyRanges,
        )).value

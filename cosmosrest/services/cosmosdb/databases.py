"""
Database operations.
"""

from .constants import RESOURCE_DATABASES
from .dispatcher import Executor, RequestDescriptor
from .models import Database, Databases
from .options import if_match_headers, require_id
from .pagination import ListIterator


class DatabaseClient:
    """Create, list, read and delete databases of an account."""

    def __init__(self, executor: Executor):
        self._executor = executor

    def create(self, database: Database) -> Database:
        """Create a database; its id must be set."""
        return self._executor.execute(RequestDescriptor(
            "POST", "dbs", RESOURCE_DATABASES, "", 201,
            body=database, result_type=Database,
        )).value

    def list(self) -> ListIterator:
        """Iterate over the databases of the account, one page at a time."""
        return ListIterator(self._executor, RequestDescriptor(
            "GET", "dbs", RESOURCE_DATABASES, "", 200,
            result_type=Databases,
        ))

    def get(self, database_id: str) -> Database:
        link = f"dbs/{database_id}"
        return self._executor.execute(RequestDescriptor(
            "GET", link, RESOURCE_DATABASES, link, 200,
            result_type=Database,
        )).value

    def delete(self, database: Database) -> None:
        """
        Delete a database if it is unchanged since it was read.

        Raises:
            ETagRequiredError: If database.etag is empty
        """
        headers = if_match_headers(database.etag)
        link = f"dbs/{require_id(database.id)}"
        self._executor.execute(RequestDescriptor(
            "DELETE", link, RESOURCE_DATABASES, link, 204,
            headers=headers,
        ))

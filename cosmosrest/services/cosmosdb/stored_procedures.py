"""
Stored procedure operations.
"""

from typing import Any, List, Optional

from .constants import RESOURCE_STORED_PROCEDURES
from .dispatcher import Executor, RequestDescriptor
from .models import StoredProcedure, StoredProcedures
from .options import Options, if_match_headers, require_id
from .pagination import ListIterator


class StoredProcedureClient:
    """Operations on the stored procedures of one collection."""

    def __init__(self, executor: Executor, database_id: str, collection_id: str):
        self._executor = executor
        self.path = f"dbs/{database_id}/colls/{collection_id}"

    def _link(self, sproc_id: str) -> str:
        return f"{self.path}/sprocs/{sproc_id}"

    def create(self, sproc: StoredProcedure) -> StoredProcedure:
        return self._executor.execute(RequestDescriptor(
            "POST", f"{self.path}/sprocs", RESOURCE_STORED_PROCEDURES, self.path, 201,
            body=sproc, result_type=StoredProcedure,
        )).value

    def list(self) -> ListIterator:
        return ListIterator(self._executor, RequestDescriptor(
            "GET", f"{self.path}/sprocs", RESOURCE_STORED_PROCEDURES, self.path, 200,
            result_type=StoredProcedures,
        ))

    def get(self, sproc_id: str) -> StoredProcedure:
        link = self._link(sproc_id)
        return self._executor.execute(RequestDescriptor(
            "GET", link, RESOURCE_STORED_PROCEDURES, link, 200,
            result_type=StoredProcedure,
        )).value

    def replace(self, sproc: StoredProcedure) -> StoredProcedure:
        """
        Replace a stored procedure body.

        Raises:
            ETagRequiredError: If sproc.etag is empty
        """
        headers = if_match_headers(sproc.etag)
        link = self._link(require_id(sproc.id))
        return self._executor.execute(RequestDescriptor(
            "PUT", link, RESOURCE_STORED_PROCEDURES, link, 200,
            body=sproc, headers=headers, result_type=StoredProcedure,
        )).value

    def delete(self, sproc: StoredProcedure) -> None:
        """
        Delete a stored procedure.

        Raises:
            ETagRequiredError: If sproc.etag is empty
        """
        headers = if_match_headers(sproc.etag)
        link = self._link(require_id(sproc.id))
        self._executor.execute(RequestDescriptor(
            "DELETE", link, RESOURCE_STORED_PROCEDURES, link, 204,
            headers=headers,
        ))

    def execute(
        self,
        sproc_id: str,
        parameters: Optional[List[Any]] = None,
        options: Optional[Options] = None,
    ) -> Any:
        """
        Execute a stored procedure.

        Args:
            sproc_id: Stored procedure id
            parameters: Positional arguments passed to the procedure
            options: Partition key the procedure runs in

        Returns:
            Raw JSON returned by the procedure
        """
        link = self._link(sproc_id)
        return self._executor.execute(RequestDescriptor(
            "POST", link, RESOURCE_STORED_PROCEDURES, link, 200,
            body=list(parameters or []),
            headers=options.headers() if options else None,
            result_type=object,
        )).value

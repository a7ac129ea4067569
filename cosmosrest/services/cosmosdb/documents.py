"""
Document operations.

Documents may be given as ``Document`` models (or subclasses) or as plain
dicts using wire names (``id``, ``_etag``).
"""

from typing import Any, Dict, Optional, Type, Union

from .constants import HEADER_CONTENT_TYPE, HEADER_IS_QUERY, QUERY_MEDIA_TYPE, RESOURCE_DOCUMENTS
from .dispatcher import Executor, RequestDescriptor
from .models import Document, Documents, Query
from .options import Options, if_match_headers, require_id
from .pagination import ListIterator

DocumentLike = Union[Document, Dict[str, Any]]


def _document_field(document: DocumentLike, name: str, alias: str) -> Optional[str]:
    if isinstance(document, dict):
        return document.get(alias)
    return getattr(document, name)


class DocumentClient:
    """Operations on the documents of one collection."""

    def __init__(
        self,
        executor: Executor,
        database_id: str,
        collection_id: str,
        document_class: Type[Document] = Document,
    ):
        """
        Initialize document client.

        Args:
            executor: Dispatcher
            database_id: Database id
            collection_id: Collection id
            document_class: Model single documents are decoded into
        """
        self._executor = executor
        self.path = f"dbs/{database_id}/colls/{collection_id}"
        self.document_class = document_class

    def _link(self, document_id: str) -> str:
        return f"{self.path}/docs/{document_id}"

    def create(self, document: DocumentLike, options: Optional[Options] = None) -> Document:
        """Create (or upsert, see Options.upsert) a document."""
        return self._executor.execute(RequestDescriptor(
            "POST", f"{self.path}/docs", RESOURCE_DOCUMENTS, self.path, 201,
            body=document, headers=options.headers() if options else None,
            result_type=self.document_class,
        )).value

    def list(self, options: Optional[Options] = None) -> ListIterator:
        """Iterate over every document of the collection (read feed)."""
        return ListIterator(self._executor, RequestDescriptor(
            "GET", f"{self.path}/docs", RESOURCE_DOCUMENTS, self.path, 200,
            headers=options.headers() if options else None,
            result_type=Documents,
        ))

    def query(self, query: Union[Query, str], options: Optional[Options] = None) -> ListIterator:
        """
        Run a SQL query; results are paged like list().

        Args:
            query: Query model or SQL text
            options: Partition key, cross-partition and page size options
        """
        if isinstance(query, str):
            query = Query(query=query)

        headers = options.headers() if options else {}
        headers[HEADER_IS_QUERY] = "True"
        headers[HEADER_CONTENT_TYPE] = QUERY_MEDIA_TYPE

        return ListIterator(self._executor, RequestDescriptor(
            "POST", f"{self.path}/docs", RESOURCE_DOCUMENTS, self.path, 200,
            body=query, headers=headers, result_type=Documents,
        ))

    def get(self, document_id: str, options: Optional[Options] = None) -> Document:
        link = self._link(document_id)
        return self._executor.execute(RequestDescriptor(
            "GET", link, RESOURCE_DOCUMENTS, link, 200,
            headers=options.headers() if options else None,
            result_type=self.document_class,
        )).value

    def replace(self, document: DocumentLike, options: Optional[Options] = None) -> Document:
        """
        Replace a document if it is unchanged since it was read.

        Raises:
            ETagRequiredError: If the document has no ETag
            ResourceIdRequiredError: If the document has no id
        """
        headers = if_match_headers(_document_field(document, "etag", "_etag"), options)
        link = self._link(require_id(_document_field(document, "id", "id")))
        return self._executor.execute(RequestDescriptor(
            "PUT", link, RESOURCE_DOCUMENTS, link, 200,
            body=document, headers=headers, result_type=self.document_class,
        )).value

    def delete(self, document: DocumentLike, options: Optional[Options] = None) -> None:
        """
        Delete a document if it is unchanged since it was read.

        Raises:
            ETagRequiredError: If the document has no ETag
            ResourceIdRequiredError: If the document has no id
        """
        headers = if_match_headers(_document_field(document, "etag", "_etag"), options)
        link = self._link(require_id(_document_field(document, "id", "id")))
        self._executor.execute(RequestDescriptor(
            "DELETE", link, RESOURCE_DOCUMENTS, link, 204,
            headers=headers,
        ))

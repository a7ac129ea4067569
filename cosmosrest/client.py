"""
Cosmos DB client facade.

Wires configuration, credentials, the httpx transport and the dispatcher
together and hands out resource clients.
"""

import logging
from typing import Any, Callable, Optional, Type, TypeVar

import httpx

from cosmosrest.auth.masterkey import Credentials
from cosmosrest.core.config_manager import CosmosRestConfig
from cosmosrest.services.cosmosdb.codec import CodecConfig, JSONCodec
from cosmosrest.services.cosmosdb.collections import CollectionClient
from cosmosrest.services.cosmosdb.databases import DatabaseClient
from cosmosrest.services.cosmosdb.dispatcher import Dispatcher
from cosmosrest.services.cosmosdb.documents import DocumentClient
from cosmosrest.services.cosmosdb.models import Document
from cosmosrest.services.cosmosdb.resilience import retry_on_precondition_failed
from cosmosrest.services.cosmosdb.stored_procedures import StoredProcedureClient

logger = logging.getLogger(__name__)

T = TypeVar('T')


class CosmosClient:
    """
    Entry point for one Cosmos DB account.

    Usage:
        with CosmosClient.from_config(config) as client:
            for page in client.collections("mydb").list():
                ...
    """

    def __init__(
        self,
        credentials: Credentials,
        config: Optional[CosmosRestConfig] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize client.

        Args:
            credentials: Account name and master key
            config: Settings (defaults when omitted)
            http_client: Transport to use; created (and owned) when omitted
        """
        self.config = config or CosmosRestConfig()
        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.Client(
            timeout=self.config.http.timeout,
            verify=self.config.http.verify_tls,
        )
        self.dispatcher = Dispatcher(
            credentials,
            self.http_client,
            codec=JSONCodec(CodecConfig(strict_required_fields=self.config.codec.strict_required_fields)),
            api_version=self.config.http.api_version,
            service_domain=self.config.account.service_domain,
            endpoint=self.config.account.endpoint,
        )
        self.databases = DatabaseClient(self.dispatcher)
        logger.debug(f"Cosmos DB client ready for {self.dispatcher.base_url}")

    @classmethod
    def from_config(cls, config: CosmosRestConfig, http_client: Optional[httpx.Client] = None) -> "CosmosClient":
        """Build a client from a loaded configuration."""
        return cls(config.account.credentials(), config=config, http_client=http_client)

    def collections(self, database_id: str) -> CollectionClient:
        return CollectionClient(self.dispatcher, database_id)

    def documents(
        self,
        database_id: str,
        collection_id: str,
        document_class: Type[Document] = Document,
    ) -> DocumentClient:
        return DocumentClient(self.dispatcher, database_id, collection_id, document_class)

    def stored_procedures(self, database_id: str, collection_id: str) -> StoredProcedureClient:
        return StoredProcedureClient(self.dispatcher, database_id, collection_id)

    def retry(self, operation: Callable[[], T], **kwargs: Any) -> T:
        """Run an operation with the configured precondition retry policy."""
        kwargs.setdefault("max_attempts", self.config.retry.max_attempts)
        kwargs.setdefault("backoff", self.config.retry.backoff_seconds)
        return retry_on_precondition_failed(operation, **kwargs)

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            self.http_client.close()

    def __enter__(self) -> "CosmosClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

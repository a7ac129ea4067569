"""
Azure Cosmos DB SQL API client.

Signed request dispatch, continuation-token pagination, precondition
retry and thin per-resource clients for the Cosmos DB REST API.
"""

from .codec import CodecConfig, JSONCodec
from .collections import CollectionClient
from .databases import DatabaseClient
from .dispatcher import Dispatcher, Executor, RequestDescriptor, Response
from .documents import DocumentClient
from .exceptions import (
    BadRequestError,
    CosmosDBError,
    CosmosDecodeError,
    CosmosHTTPError,
    CosmosTransportError,
    ETagRequiredError,
    ForbiddenError,
    PreconditionFailedError,
    ResourceConflictError,
    ResourceNotFoundError,
    TooManyRequestsError,
    UnauthorizedError,
    error_for_status,
    is_error_status_code,
)
from .models import (
    Collection,
    Collections,
    ConflictResolutionPolicy,
    Database,
    Databases,
    Document,
    Documents,
    ExcludedPath,
    GeospatialConfig,
    IncludedPath,
    Index,
    IndexingPolicy,
    Parameter,
    PartitionKey,
    PartitionKeyRange,
    PartitionKeyRanges,
    Query,
    StoredProcedure,
    StoredProcedures,
)
from .options import Options
from .pagination import ListIterator
from .resilience import retry_on_precondition_failed, with_retry_on_precondition_failed
from .stored_procedures import StoredProcedureClient

__all__ = [
    # Core
    "CodecConfig",
    "JSONCodec",
    "Dispatcher",
    "Executor",
    "RequestDescriptor",
    "Response",
    "ListIterator",
    "Options",
    "retry_on_precondition_failed",
    "with_retry_on_precondition_failed",
    # Resource clients
    "DatabaseClient",
    "CollectionClient",
    "DocumentClient",
    "StoredProcedureClient",
    # Models
    "Collection",
    "Collections",
    "ConflictResolutionPolicy",
    "Database",
    "Databases",
    "Document",
    "Documents",
    "ExcludedPath",
    "GeospatialConfig",
    "IncludedPath",
    "Index",
    "IndexingPolicy",
    "Parameter",
    "PartitionKey",
    "PartitionKeyRange",
    "PartitionKeyRanges",
    "Query",
    "StoredProcedure",
    "StoredProcedures",
    # Exceptions
    "CosmosDBError",
    "CosmosHTTPError",
    "CosmosTransportError",
    "CosmosDecodeError",
    "ETagRequiredError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "ResourceNotFoundError",
    "ResourceConflictError",
    "PreconditionFailedError",
    "TooManyRequestsError",
    "error_for_status",
    "is_error_status_code",
]

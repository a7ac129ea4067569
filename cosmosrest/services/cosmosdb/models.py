"""
Cosmos DB Models.

Pydantic models for Cosmos DB resources as they appear on the wire.

Every declared field is omitted from request bodies when empty. Fields
built with ``server_field`` are optional when sending but must be present
in responses when the codec decodes strictly.
"""

from typing import Any, ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Marker stored in json_schema_extra for fields required when decoding
REQUIRED_ON_DECODE = "required_on_decode"

# Characters the service rejects in resource ids
_INVALID_ID_CHARACTERS = ("/", "\\", "?", "#")


def server_field(alias: Optional[str] = None, **kwargs: Any) -> Any:
    """Field that may be left empty on requests but is required in responses."""
    return Field(default=None, alias=alias, json_schema_extra={REQUIRED_ON_DECODE: True}, **kwargs)


class WireModel(BaseModel):
    """Base for all wire shapes.

    Unknown response fields are ignored; fields accept both their Python
    name and their wire alias.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Resource(WireModel):
    """Common system properties of every Cosmos DB resource.

    Attributes:
        id: User-supplied resource identifier
        rid: Resource ID (_rid)
        ts: Last update timestamp (_ts)
        self_link: Self link (_self)
        etag: ETag used for optimistic concurrency (_etag)
    """

    id: Optional[str] = server_field()
    rid: Optional[str] = server_field(alias="_rid")
    ts: Optional[int] = Field(default=None, alias="_ts")
    self_link: Optional[str] = server_field(alias="_self")
    etag: Optional[str] = server_field(alias="_etag")

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: Optional[str]) -> Optional[str]:
        """Validate resource ID.

        Raises:
            ValueError: If ID is too long or contains reserved characters
        """
        if v is None:
            return v

        if len(v) > 255:
            raise ValueError("Resource ID must be 255 characters or less")

        for char in _INVALID_ID_CHARACTERS:
            if char in v:
                raise ValueError(f"Resource ID cannot contain '{char}'")

        return v


class ResourceList(WireModel):
    """Common envelope of list responses."""

    # Name of the field holding the page of resources
    items_field: ClassVar[str] = ""

    rid: Optional[str] = server_field(alias="_rid")
    count: Optional[int] = server_field(alias="_count")

    @property
    def resources(self) -> List[Any]:
        """Resources contained in this page."""
        return getattr(self, self.items_field) or []


# ========== Databases ==========

class Database(Resource):
    """Cosmos DB database."""

    colls: Optional[str] = Field(default=None, alias="_colls")
    users: Optional[str] = Field(default=None, alias="_users")


class Databases(ResourceList):
    """A page of databases."""

    items_field: ClassVar[str] = "databases"

    databases: Optional[List[Database]] = server_field(alias="Databases")


# ========== Collections ==========

class Index(WireModel):
    """Index specification of an indexing path."""

    data_type: Optional[str] = Field(default=None, alias="dataType")
    kind: Optional[str] = None
    precision: Optional[int] = None


class IncludedPath(WireModel):
    """Path included in indexing."""

    path: Optional[str] = None
    indexes: Optional[List[Index]] = None


class ExcludedPath(WireModel):
    """Path excluded from indexing."""

    path: Optional[str] = None


class IndexingPolicy(WireModel):
    """Indexing policy of a collection.

    Attributes:
        automatic: Whether indexing is automatic
        indexing_mode: Indexing mode (consistent, lazy, none)
        included_paths: Paths included in the index
        excluded_paths: Paths excluded from the index
    """

    automatic: Optional[bool] = None
    indexing_mode: Optional[str] = Field(default=None, alias="indexingMode")
    included_paths: Optional[List[IncludedPath]] = Field(default=None, alias="includedPaths")
    excluded_paths: Optional[List[ExcludedPath]] = Field(default=None, alias="excludedPaths")


class PartitionKey(WireModel):
    """Partition key definition.

    Attributes:
        paths: Partition key paths (e.g., ["/userId"])
        kind: Partition key kind (Hash or Range)
        version: Partition key version (1 or 2)
    """

    paths: Optional[List[str]] = None
    kind: Optional[str] = None
    version: Optional[int] = None

    @field_validator("paths")
    @classmethod
    def validate_paths(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        """Validate partition key paths.

        Raises:
            ValueError: If a path does not start with '/'
        """
        for path in v or []:
            if not path.startswith("/"):
                raise ValueError(f"Partition key path must start with '/': {path}")
        return v


class ConflictResolutionPolicy(WireModel):
    """Conflict resolution policy for multi-region writes."""

    mode: Optional[str] = None
    conflict_resolution_path: Optional[str] = Field(default=None, alias="conflictResolutionPath")
    conflict_resolution_procedure: Optional[str] = Field(default=None, alias="conflictResolutionProcedure")


class GeospatialConfig(WireModel):
    """Geospatial configuration (Geography or Geometry)."""

    type: Optional[str] = None


class Collection(Resource):
    """Cosmos DB collection (container)."""

    docs: Optional[str] = Field(default=None, alias="_docs")
    sprocs: Optional[str] = Field(default=None, alias="_sprocs")
    triggers: Optional[str] = Field(default=None, alias="_triggers")
    udfs: Optional[str] = Field(default=None, alias="_udfs")
    conflicts: Optional[str] = Field(default=None, alias="_conflicts")
    indexing_policy: Optional[IndexingPolicy] = Field(default=None, alias="indexingPolicy")
    partition_key: Optional[PartitionKey] = Field(default=None, alias="partitionKey")
    conflict_resolution_policy: Optional[ConflictResolutionPolicy] = Field(
        default=None, alias="conflictResolutionPolicy"
    )
    geospatial_config: Optional[GeospatialConfig] = Field(default=None, alias="geospatialConfig")


class Collections(ResourceList):
    """A page of collections."""

    items_field: ClassVar[str] = "collections"

    collections: Optional[List[Collection]] = server_field(alias="DocumentCollections")


class PartitionKeyRange(Resource):
    """Physical partition of a collection."""

    max_exclusive: Optional[str] = Field(default=None, alias="maxExclusive")
    min_inclusive: Optional[str] = Field(default=None, alias="minInclusive")
    rid_prefix: Optional[int] = Field(default=None, alias="ridPrefix")
    throughput_fraction: Optional[float] = Field(default=None, alias="throughputFraction")
    status: Optional[str] = None
    parents: Optional[List[str]] = None


class PartitionKeyRanges(ResourceList):
    """Partition key ranges of a collection."""

    items_field: ClassVar[str] = "partition_key_ranges"

    partition_key_ranges: Optional[List[PartitionKeyRange]] = server_field(alias="PartitionKeyRanges")


# ========== Documents ==========

class Document(Resource):
    """Cosmos DB document.

    User properties are kept as extra fields and sent back unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    attachments: Optional[str] = Field(default=None, alias="_attachments")


class Documents(ResourceList):
    """A page of documents."""

    items_field: ClassVar[str] = "documents"

    documents: Optional[List[Document]] = server_field(alias="Documents")


class Parameter(WireModel):
    """Named query parameter (e.g., @name)."""

    name: Optional[str] = None
    value: Any = None


class Query(WireModel):
    """SQL query with parameters."""

    query: Optional[str] = None
    parameters: Optional[List[Parameter]] = None


# ========== Stored procedures ==========

class StoredProcedure(Resource):
    """Server-side JavaScript stored procedure."""

    body: Optional[str] = None


class StoredProcedures(ResourceList):
    """A page of stored procedures."""

    items_field: ClassVar[str] = "stored_procedures"

    stored_procedures: Optional[List[StoredProcedure]] = server_field(alias="StoredProcedures")

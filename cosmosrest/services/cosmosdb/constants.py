"""
Cosmos DB Constants

Header names, media types and protocol defaults for the Cosmos DB REST API.
"""

# Protocol
DEFAULT_API_VERSION = "2018-12-31"
DEFAULT_SERVICE_DOMAIN = "documents.azure.com"

# Media types
JSON_MEDIA_TYPE = "application/json"
QUERY_MEDIA_TYPE = "application/query+json"

# Request headers
HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_DATE = "x-ms-date"
HEADER_VERSION = "x-ms-version"
HEADER_IF_MATCH = "If-Match"
HEADER_CONTINUATION = "X-Ms-Continuation"
HEADER_PRE_TRIGGER_INCLUDE = "X-Ms-Documentdb-Pre-Trigger-Include"
HEADER_POST_TRIGGER_INCLUDE = "X-Ms-Documentdb-Post-Trigger-Include"
HEADER_PARTITION_KEY = "x-ms-documentdb-partitionkey"
HEADER_IS_UPSERT = "x-ms-documentdb-is-upsert"
HEADER_IS_QUERY = "x-ms-documentdb-isquery"
HEADER_ENABLE_CROSS_PARTITION = "x-ms-documentdb-query-enablecrosspartition"
HEADER_MAX_ITEM_COUNT = "x-ms-max-item-count"

# Response headers
HEADER_ETAG = "etag"
HEADER_REQUEST_CHARGE = "x-ms-request-charge"
HEADER_SESSION_TOKEN = "x-ms-session-token"
HEADER_ACTIVITY_ID = "x-ms-activity-id"

# Resource types (signing tokens)
RESOURCE_DATABASES = "dbs"
RESOURCE_COLLECTIONS = "colls"
RESOURCE_DOCUMENTS = "docs"
RESOURCE_STORED_PROCEDURES = "sprocs"
RESOURCE_PARTITION_KEY_RANGES = "pkranges"

# Retry defaults
DEFAULT_RETRY_ATTEMPTS = 5
DEFAULT_RETRY_BACKOFF = 0.1  # seconds, multiplied by the attempt index

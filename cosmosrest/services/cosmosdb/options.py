"""
Per-request options for Cosmos DB operations.

Options are turned into request headers; empty options add no headers.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import (
    HEADER_ENABLE_CROSS_PARTITION,
    HEADER_IF_MATCH,
    HEADER_IS_UPSERT,
    HEADER_MAX_ITEM_COUNT,
    HEADER_PARTITION_KEY,
    HEADER_POST_TRIGGER_INCLUDE,
    HEADER_PRE_TRIGGER_INCLUDE,
)
from .exceptions import ETagRequiredError, ResourceIdRequiredError

# Marks a partition key value that was not given
_UNSET = object()


@dataclass
class Options:
    """Options accepted by document and stored procedure operations.

    Attributes:
        pre_triggers: Triggers to run before the operation, in order
        post_triggers: Triggers to run after the operation, in order
        partition_key: Partition key value of the target document
        upsert: Create or replace on create
        max_item_count: Page size for list and query operations
        enable_cross_partition: Allow queries spanning partitions
    """

    pre_triggers: List[str] = field(default_factory=list)
    post_triggers: List[str] = field(default_factory=list)
    partition_key: Any = _UNSET
    upsert: bool = False
    max_item_count: Optional[int] = None
    enable_cross_partition: bool = False

    def headers(self) -> Dict[str, str]:
        """Render the options as request headers."""
        headers: Dict[str, str] = {}
        set_options(self, headers)
        return headers


def set_options(options: Optional[Options], headers: Dict[str, str]) -> None:
    """
    Add the headers for a set of options.

    Args:
        options: Options to apply (None adds nothing)
        headers: Header mapping updated in place
    """
    if options is None:
        return
    if options.pre_triggers:
        headers[HEADER_PRE_TRIGGER_INCLUDE] = ",".join(options.pre_triggers)
    if options.post_triggers:
        headers[HEADER_POST_TRIGGER_INCLUDE] = ",".join(options.post_triggers)
    if options.partition_key is not _UNSET:
        headers[HEADER_PARTITION_KEY] = json.dumps([options.partition_key])
    if options.upsert:
        headers[HEADER_IS_UPSERT] = "True"
    if options.max_item_count is not None:
        headers[HEADER_MAX_ITEM_COUNT] = str(options.max_item_count)
    if options.enable_cross_partition:
        headers[HEADER_ENABLE_CROSS_PARTITION] = "True"


def if_match_headers(etag: Optional[str], options: Optional[Options] = None) -> Dict[str, str]:
    """
    Build headers for an operation guarded by an ETag.

    Raises:
        ETagRequiredError: If etag is empty
    """
    if not etag:
        raise ETagRequiredError()
    headers = {HEADER_IF_MATCH: etag}
    set_options(options, headers)
    return headers


def require_id(resource_id: Optional[str]) -> str:
    """
    Return the id used to build a resource link.

    Raises:
        ResourceIdRequiredError: If resource_id is empty
    """
    if not resource_id:
        raise ResourceIdRequiredError()
    return resource_id

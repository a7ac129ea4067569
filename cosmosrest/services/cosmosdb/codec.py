"""
JSON codec for Cosmos DB request and response bodies.

Request bodies drop empty model fields; response bodies can be decoded
strictly, failing when a field marked required on decode is missing.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError
from pydantic_core import to_jsonable_python

from .constants import JSON_MEDIA_TYPE
from .exceptions import CosmosDecodeError
from .models import REQUIRED_ON_DECODE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CodecConfig:
    """Codec options.

    Attributes:
        strict_required_fields: Fail decoding when a required-on-decode
            field is absent from the payload
    """

    strict_required_fields: bool = True


def is_json(content_type: Optional[str]) -> bool:
    """Return True if a Content-Type header declares JSON."""
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == JSON_MEDIA_TYPE


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, list, tuple, dict)) and len(value) == 0:
        return True
    return False


def _dump_model(model: BaseModel) -> Dict[str, Any]:
    """Dump a model by alias, leaving out empty declared fields."""
    data: Dict[str, Any] = {}
    for name, info in type(model).model_fields.items():
        value = getattr(model, name)
        if _is_empty(value):
            continue
        data[info.alias or name] = to_wire(value)

    # Extra fields are user data and are sent as-is
    for name, value in (model.model_extra or {}).items():
        data[name] = to_wire(value)

    return data


def to_wire(value: Any) -> Any:
    """Convert a value to its JSON-compatible wire form."""
    if isinstance(value, BaseModel):
        return _dump_model(value)
    if isinstance(value, dict):
        return {key: to_wire(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_wire(item) for item in value]
    return to_jsonable_python(value)


def _model_types(annotation: Any) -> List[Type[BaseModel]]:
    """Find model classes inside an annotation (Optional[X], List[X], ...)."""
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return [annotation]
    found: List[Type[BaseModel]] = []
    if get_origin(annotation) is not None:
        for arg in get_args(annotation):
            found.extend(_model_types(arg))
    return found


def _is_required_on_decode(info: Any) -> bool:
    extra = info.json_schema_extra
    return isinstance(extra, dict) and bool(extra.get(REQUIRED_ON_DECODE))


def missing_fields(target: Type[BaseModel], payload: Any, prefix: str = "") -> List[str]:
    """
    List required-on-decode fields missing from a payload.

    Args:
        target: Model class the payload decodes into
        payload: Parsed JSON
        prefix: Path of the payload inside the document

    Returns:
        Dotted paths of missing fields
    """
    if not isinstance(payload, dict):
        return []

    missing: List[str] = []
    for name, info in target.model_fields.items():
        key = info.alias or name
        if key in payload:
            value = payload[key]
        elif name in payload:
            value = payload[name]
        else:
            if _is_required_on_decode(info):
                missing.append(f"{prefix}{key}")
            continue

        for model_type in _model_types(info.annotation):
            items = value if isinstance(value, list) else [value]
            for index, item in enumerate(items):
                path = f"{prefix}{key}[{index}]." if isinstance(value, list) else f"{prefix}{key}."
                missing.extend(missing_fields(model_type, item, path))

    return missing


class JSONCodec:
    """Encodes request bodies and decodes response bodies."""

    content_type = JSON_MEDIA_TYPE

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig()

    def encode(self, value: Any) -> bytes:
        """
        Serialize a request payload.

        Args:
            value: Pydantic model, dict, list or scalar

        Returns:
            Compact UTF-8 JSON
        """
        return json.dumps(to_wire(value), separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    def decode(self, data: Union[bytes, str], target: Optional[Any] = None) -> Any:
        """
        Deserialize a response body.

        Args:
            data: Raw body
            target: Model class to decode into; anything else returns raw JSON

        Returns:
            Model instance or parsed JSON

        Raises:
            CosmosDecodeError: If the body is malformed or does not fit target
        """
        try:
            payload = json.loads(data)
        except ValueError as e:
            raise CosmosDecodeError(f"Response body is not valid JSON: {e}") from e

        if not (isinstance(target, type) and issubclass(target, BaseModel)):
            return payload

        if self.config.strict_required_fields:
            missing = missing_fields(target, payload)
            if missing:
                raise CosmosDecodeError(
                    f"{target.__name__} response is missing required fields: {', '.join(missing)}"
                )

        try:
            return target.model_validate(payload)
        except ValidationError as e:
            raise CosmosDecodeError(f"Response does not match {target.__name__}: {e}") from e

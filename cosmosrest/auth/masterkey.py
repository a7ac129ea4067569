"""
Master key authorization for Cosmos DB REST requests.

Implements the master key token scheme used by the Cosmos DB SQL API:

    StringToSign = lower(verb) + "\\n"
                 + resourceType + "\\n"
                 + resourceLink + "\\n"
                 + lower(x-ms-date) + "\\n"
                 + "" + "\\n"

    Authorization = urlencode("type=master&ver=1.0&sig=" + Base64(HMAC-SHA256(key, StringToSign)))

Reference: https://learn.microsoft.com/en-us/rest/api/cosmos-db/access-control-on-cosmosdb-resources
"""

import base64
import binascii
import hashlib
import hmac
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional
from urllib.parse import quote

from cosmosrest.auth.exceptions import InvalidConnectionStringError, InvalidMasterKeyError

logger = logging.getLogger(__name__)

# RFC 1123 format expected in x-ms-date
DATE_FORMAT = "%a, %d %b %Y %H:%M:%S GMT"

TOKEN_TYPE = "master"
TOKEN_VERSION = "1.0"


@dataclass(frozen=True)
class Credentials:
    """Account credentials for master key authorization."""

    account_name: str
    master_key: bytes = field(repr=False)
    endpoint: Optional[str] = None

    @classmethod
    def from_base64(cls, account_name: str, master_key: str, endpoint: Optional[str] = None) -> "Credentials":
        """
        Build credentials from the base64 key string shown by the portal.

        Raises:
            InvalidMasterKeyError: If the key is not valid base64
        """
        try:
            key_bytes = base64.b64decode(master_key, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidMasterKeyError(f"Master key for account '{account_name}' is not valid base64") from e
        return cls(account_name=account_name, master_key=key_bytes, endpoint=endpoint)

    @classmethod
    def from_connection_string(cls, connection_string: str) -> "Credentials":
        """
        Build credentials from an ``AccountEndpoint=...;AccountKey=...;`` string.

        The account name is the first label of the endpoint host.

        Raises:
            InvalidConnectionStringError: If a required part is missing
        """
        parts = parse_connection_string(connection_string)

        endpoint = parts.get("accountendpoint")
        account_key = parts.get("accountkey")
        if not endpoint or not account_key:
            raise InvalidConnectionStringError(
                "Connection string must contain AccountEndpoint and AccountKey"
            )

        host = endpoint.split("://", 1)[-1].split("/", 1)[0].split(":", 1)[0]
        account_name = host.split(".", 1)[0]
        if not account_name:
            raise InvalidConnectionStringError(f"Cannot derive account name from endpoint: {endpoint}")

        return cls.from_base64(account_name, account_key, endpoint=endpoint)


def parse_connection_string(connection_string: str) -> Dict[str, str]:
    """
    Parse a ``key=value;`` connection string.

    Keys are lowercased; values keep their case and any ``=`` padding.
    """
    parts: Dict[str, str] = {}
    for segment in connection_string.split(";"):
        segment = segment.strip()
        if not segment:
            continue
        if "=" not in segment:
            raise InvalidConnectionStringError("Connection string segments must be in format: name=value")
        name, value = segment.split("=", 1)
        parts[name.strip().lower()] = value.strip()
    return parts


def format_date(moment: Optional[datetime] = None) -> str:
    """
    Format a timestamp for the x-ms-date header.

    Args:
        moment: Time to format (defaults to now, UTC)

    Returns:
        RFC 1123 date string
    """
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(DATE_FORMAT)


def parse_date(date: str) -> datetime:
    """
    Parse an RFC 1123 x-ms-date value.

    Raises:
        ValueError: If the value is not in RFC 1123 format
    """
    return datetime.strptime(date, DATE_FORMAT).replace(tzinfo=timezone.utc)


def build_string_to_sign(method: str, resource_type: str, resource_link: str, date: str) -> str:
    """Build the five-field string signed for a request."""
    return "\n".join([
        method.lower(),
        resource_type,
        resource_link,
        date.lower(),
        "",
    ]) + "\n"


def compute_signature(string_to_sign: str, master_key: bytes) -> str:
    """
    Compute HMAC-SHA256 signature.

    Args:
        string_to_sign: Canonical string
        master_key: Decoded master key bytes

    Returns:
        Base64-encoded signature
    """
    digest = hmac.new(master_key, string_to_sign.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def sign(method: str, resource_type: str, resource_link: str, date: str, master_key: bytes) -> str:
    """
    Compute the Authorization header value for a request.

    Args:
        method: HTTP method
        resource_type: Resource type token (dbs, colls, docs, ...)
        resource_link: Resource link signed for this request
        date: x-ms-date value sent with the same request
        master_key: Decoded master key bytes

    Returns:
        Percent-encoded authorization token
    """
    string_to_sign = build_string_to_sign(method, resource_type, resource_link, date)
    signature = compute_signature(string_to_sign, master_key)
    token = f"type={TOKEN_TYPE}&ver={TOKEN_VERSION}&sig={signature}"
    return quote(token, safe="")


def authorization_headers(
    credentials: Credentials,
    method: str,
    resource_type: str,
    resource_link: str,
    moment: Optional[datetime] = None,
) -> Dict[str, str]:
    """
    Build the Authorization and x-ms-date headers for one request.

    Returns:
        Dict with both headers; the date is the one that was signed
    """
    date = format_date(moment)
    token = sign(method, resource_type, resource_link, date, credentials.master_key)
    logger.debug(f"Signed {method.upper()} request for {resource_type} '{resource_link}'")
    return {
        "Authorization": token,
        "x-ms-date": date,
    }

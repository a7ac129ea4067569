"""
cosmosrest Authentication Module.

Master key signing for Cosmos DB REST requests.
"""

from cosmosrest.auth.exceptions import (
    AuthenticationError,
    InvalidConnectionStringError,
    InvalidMasterKeyError,
)
from cosmosrest.auth.masterkey import (
    Credentials,
    authorization_headers,
    build_string_to_sign,
    compute_signature,
    format_date,
    parse_connection_string,
    parse_date,
    sign,
)

__all__ = [
    # Exceptions
    "AuthenticationError",
    "InvalidConnectionStringError",
    "InvalidMasterKeyError",
    # Master key auth
    "Credentials",
    "authorization_headers",
    "build_string_to_sign",
    "compute_signature",
    "format_date",
    "parse_connection_string",
    "parse_date",
    "sign",
]

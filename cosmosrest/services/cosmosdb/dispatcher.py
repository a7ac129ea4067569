"""
Request dispatch for the Cosmos DB REST API.

Every resource operation goes through ``Dispatcher.execute``: the request
is built against the account endpoint, signed with the master key,
sent with httpx and its response classified against the expected status.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Protocol

import httpx

from cosmosrest.auth.masterkey import Credentials, authorization_headers
from cosmosrest.core.logging_config import log_with_context

from .codec import JSONCodec, is_json
from .constants import (
    DEFAULT_API_VERSION,
    DEFAULT_SERVICE_DOMAIN,
    HEADER_CONTENT_TYPE,
    HEADER_CONTINUATION,
    HEADER_ETAG,
    HEADER_REQUEST_CHARGE,
    HEADER_SESSION_TOKEN,
    HEADER_VERSION,
)
from .exceptions import CosmosDecodeError, CosmosTransportError, error_for_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything the dispatcher needs to perform one operation.

    Attributes:
        method: HTTP method
        path: URL path relative to the account endpoint
        resource_type: Resource type token used in signing
        resource_link: Resource link used in signing
        expected_status: Status code that means success
        body: Request payload (model, dict, list) or None
        headers: Extra request headers
        result_type: Model class to decode into, ``object`` for raw JSON,
            or None when no result is wanted
    """

    method: str
    path: str
    resource_type: str
    resource_link: str
    expected_status: int
    body: Any = None
    headers: Optional[Mapping[str, str]] = None
    result_type: Optional[Any] = None

    def with_headers(self, headers: Mapping[str, str]) -> "RequestDescriptor":
        """Return a copy with additional headers."""
        merged = dict(self.headers or {})
        merged.update(headers)
        return replace(self, headers=merged)


@dataclass
class Response:
    """Outcome of a successful dispatch.

    Attributes:
        status_code: HTTP status code
        headers: Response headers (case-insensitive)
        value: Decoded body, or None
    """

    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    value: Any = None

    @property
    def continuation(self) -> str:
        """Continuation token; empty when there are no more pages."""
        return self.headers.get(HEADER_CONTINUATION, "")

    @property
    def etag(self) -> str:
        return self.headers.get(HEADER_ETAG, "")

    @property
    def session_token(self) -> str:
        return self.headers.get(HEADER_SESSION_TOKEN, "")

    @property
    def request_charge(self) -> float:
        """Request units consumed by the operation."""
        try:
            return float(self.headers.get(HEADER_REQUEST_CHARGE, "0") or 0)
        except ValueError:
            return 0.0


class Executor(Protocol):
    """Anything able to perform a request descriptor."""

    def execute(self, descriptor: RequestDescriptor) -> Response:
        ...


def account_endpoint(account_name: str, service_domain: str = DEFAULT_SERVICE_DOMAIN) -> str:
    """Build the account-scoped base address."""
    return f"https://{account_name}.{service_domain}/"


class Dispatcher:
    """
    Sends signed requests to one Cosmos DB account.

    Holds no per-request state; one instance can be shared by every
    resource client and by concurrent callers.
    """

    def __init__(
        self,
        credentials: Credentials,
        http_client: httpx.Client,
        codec: Optional[JSONCodec] = None,
        api_version: str = DEFAULT_API_VERSION,
        service_domain: str = DEFAULT_SERVICE_DOMAIN,
        endpoint: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize dispatcher.

        Args:
            credentials: Account name and master key
            http_client: Transport used to send requests
            codec: Body codec (strict by default)
            api_version: Value of the x-ms-version header
            service_domain: Domain appended to the account name
            endpoint: Explicit base address (emulator, connection string)
            clock: Returns the signing time; defaults to now
        """
        self.credentials = credentials
        self.http_client = http_client
        self.codec = codec or JSONCodec()
        self.api_version = api_version
        base = endpoint or credentials.endpoint or account_endpoint(credentials.account_name, service_domain)
        self.base_url = base if base.endswith("/") else base + "/"
        self._clock = clock

    def build_request(self, descriptor: RequestDescriptor) -> httpx.Request:
        """
        Build the signed outbound request for a descriptor.

        Args:
            descriptor: Operation to perform

        Returns:
            Request ready to be sent
        """
        headers = httpx.Headers()
        content = None

        if descriptor.body is not None:
            content = self.codec.encode(descriptor.body)
            headers[HEADER_CONTENT_TYPE] = self.codec.content_type

        for name, value in (descriptor.headers or {}).items():
            headers[name] = value

        headers[HEADER_VERSION] = self.api_version

        moment = self._clock() if self._clock else None
        headers.update(
            authorization_headers(
                self.credentials,
                descriptor.method,
                descriptor.resource_type,
                descriptor.resource_link,
                moment,
            )
        )

        return self.http_client.build_request(
            descriptor.method,
            self.base_url + descriptor.path,
            headers=headers,
            content=content,
        )

    def execute(self, descriptor: RequestDescriptor) -> Response:
        """
        Perform one operation.

        Args:
            descriptor: Operation to perform

        Returns:
            Response with headers and the decoded result (if requested)

        Raises:
            CosmosTransportError: If the request could not be sent or read
            CosmosHTTPError: If the status differs from the expected one
            CosmosDecodeError: If a successful response body is malformed
        """
        request = self.build_request(descriptor)

        try:
            http_response = self.http_client.send(request)
        except httpx.HTTPError as e:
            logger.warning(
                f"Transport failure: {descriptor.method} {descriptor.path}: {type(e).__name__}"
            )
            raise CosmosTransportError(f"{descriptor.method} {descriptor.path} failed: {e}") from e

        response = Response(status_code=http_response.status_code, headers=http_response.headers)
        declares_json = is_json(http_response.headers.get(HEADER_CONTENT_TYPE))

        if http_response.status_code != descriptor.expected_status:
            code, message = "", ""
            if declares_json:
                code, message = self._decode_error_body(http_response.content)
            error = error_for_status(http_response.status_code, code, message)
            log_with_context(
                logger,
                logging.WARNING,
                f"Unexpected status {http_response.status_code} for {descriptor.method} {descriptor.path}",
                method=descriptor.method,
                path=descriptor.path,
                expected_status=descriptor.expected_status,
                status_code=http_response.status_code,
                error_code=code,
            )
            raise error

        if descriptor.result_type is not None and declares_json:
            response.value = self.codec.decode(http_response.content, descriptor.result_type)

        log_with_context(
            logger,
            logging.DEBUG,
            f"{descriptor.method} {descriptor.path} -> {http_response.status_code}",
            method=descriptor.method,
            path=descriptor.path,
            status_code=http_response.status_code,
            request_charge=response.request_charge,
        )
        return response

    def _decode_error_body(self, content: bytes):
        """Extract (code, message) from an error body; malformed bodies yield empty values."""
        try:
            payload = self.codec.decode(content)
        except CosmosDecodeError:
            logger.debug("Ignoring malformed error body")
            return "", ""
        if not isinstance(payload, dict):
            return "", ""
        return str(payload.get("code") or ""), str(payload.get("message") or "")

"""Shared fixtures: credentials, a fixed clock and a dispatcher over a mock transport."""

import base64
import logging
from datetime import datetime, timezone

import httpx
import pytest

from cosmosrest.auth.masterkey import Credentials
from cosmosrest.services.cosmosdb.codec import CodecConfig, JSONCodec
from cosmosrest.services.cosmosdb.dispatcher import Dispatcher

MASTER_KEY = b"cosmosrest-test-master-key-0123456789abcdef"
FIXED_TIME = datetime(2018, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


class RecordingTransport(httpx.MockTransport):
    """Mock transport remembering every request it handled."""

    def __init__(self, handler):
        self.requests = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(recording_handler)


@pytest.fixture
def master_key():
    return MASTER_KEY


@pytest.fixture
def credentials():
    return Credentials(account_name="testaccount", master_key=MASTER_KEY)


@pytest.fixture
def master_key_b64():
    return base64.b64encode(MASTER_KEY).decode()


@pytest.fixture
def make_dispatcher(credentials):
    """Build a dispatcher whose transport answers with handler(request)."""
    def factory(handler, strict=True, **kwargs):
        transport = RecordingTransport(handler)
        dispatcher = Dispatcher(
            credentials,
            httpx.Client(transport=transport),
            codec=JSONCodec(CodecConfig(strict_required_fields=strict)),
            clock=lambda: FIXED_TIME,
            **kwargs,
        )
        return dispatcher, transport
    return factory


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo setup_logging(): root handlers, root level and per-module levels."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    root_level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(root_level)
    for logger in list(logging.Logger.manager.loggerDict.values()):
        if isinstance(logger, logging.Logger):
            logger.setLevel(logging.NOTSET)

"""
Tests for the CosmosClient facade.
"""

import httpx
import pytest

from cosmosrest.client import CosmosClient
from cosmosrest.core.config_manager import CosmosRestConfig
from cosmosrest.services.cosmosdb.collections import CollectionClient
from cosmosrest.services.cosmosdb.databases import DatabaseClient
from cosmosrest.services.cosmosdb.documents import DocumentClient
from cosmosrest.services.cosmosdb.exceptions import PreconditionFailedError
from cosmosrest.services.cosmosdb.models import Document
from cosmosrest.services.cosmosdb.stored_procedures import StoredProcedureClient


def mock_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestCosmosClient:
    """Test client wiring."""

    def test_resource_clients(self, credentials):
        """Test resource clients share the client's dispatcher."""
        with CosmosClient(credentials, http_client=mock_client(lambda r: httpx.Response(200))) as client:
            assert isinstance(client.databases, DatabaseClient)
            assert isinstance(client.collections("db"), CollectionClient)
            assert isinstance(client.stored_procedures("db", "coll"), StoredProcedureClient)

            documents = client.documents("db", "coll")
            assert isinstance(documents, DocumentClient)
            assert documents.path == "dbs/db/colls/coll"
            assert documents.document_class is Document

    def test_default_endpoint(self, credentials):
        """Test the account endpoint is derived from the account name."""
        client = CosmosClient(credentials, http_client=mock_client(lambda r: httpx.Response(200)))

        assert client.dispatcher.base_url == "https://testaccount.documents.azure.com/"

    def test_config_applied(self, credentials):
        """Test endpoint, API version and strictness come from configuration."""
        config = CosmosRestConfig(
            account={"endpoint": "https://localhost:8081"},
            http={"api_version": "2020-07-15"},
            codec={"strict_required_fields": False},
        )

        client = CosmosClient(credentials, config=config, http_client=mock_client(lambda r: httpx.Response(200)))

        assert client.dispatcher.base_url == "https://localhost:8081/"
        assert client.dispatcher.api_version == "2020-07-15"
        assert client.dispatcher.codec.config.strict_required_fields is False

    def test_from_config(self, master_key_b64, master_key):
        """Test credentials are built from the configured account."""
        config = CosmosRestConfig(account={"name": "cfgacct", "master_key": master_key_b64})

        client = CosmosClient.from_config(config, http_client=mock_client(lambda r: httpx.Response(200)))

        assert client.dispatcher.credentials.account_name == "cfgacct"
        assert client.dispatcher.credentials.master_key == master_key

    def test_owned_http_client_closed(self, credentials):
        """Test a client created internally is closed on exit."""
        with CosmosClient(credentials) as client:
            http_client = client.http_client

        assert http_client.is_closed

    def test_external_http_client_left_open(self, credentials):
        """Test a caller supplied HTTP client is not closed."""
        http_client = mock_client(lambda r: httpx.Response(200))

        with CosmosClient(credentials, http_client=http_client):
            pass

        assert not http_client.is_closed

    def test_retry_uses_configured_policy(self, credentials):
        """Test retry() applies the configured attempt budget."""
        config = CosmosRestConfig(retry={"max_attempts": 2, "backoff_seconds": 0})
        client = CosmosClient(credentials, config=config, http_client=mock_client(lambda r: httpx.Response(200)))
        calls = []

        def operation():
            calls.append(1)
            raise PreconditionFailedError(412)

        with pytest.raises(PreconditionFailedError):
            client.retry(operation, sleep=lambda _: None)

        assert len(calls) == 2

    def test_read_modify_write(self, credentials):
        """Test a stale replace is retried after re-reading the document."""
        state = {"etag": "\"1\"", "value": 0, "conflicts": 1}

        def handler(request):
            if request.method == "GET":
                return httpx.Response(200, json={
                    "id": "counter", "_rid": "r", "_self": "s", "_etag": state["etag"], "value": state["value"],
                })
            if state["conflicts"]:
                state["conflicts"] -= 1
                state["etag"] = "\"2\""
                return httpx.Response(412, json={"code": "PreconditionFailed", "message": "stale"})
            assert request.headers["if-match"] == state["etag"]
            state["value"] += 1
            return httpx.Response(200, json={
                "id": "counter", "_rid": "r", "_self": "s", "_etag": "\"3\"", "value": state["value"],
            })

        client = CosmosClient(credentials, http_client=mock_client(handler))
        documents = client.documents("db", "coll")

        def increment():
            document = documents.get("counter")
            document.value += 1
            return documents.replace(document)

        result = client.retry(increment, sleep=lambda _: None)

        assert result.value == 1
        assert result.etag == "\"3\""

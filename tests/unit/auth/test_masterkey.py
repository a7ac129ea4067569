"""Tests for master key request signing."""

import base64
import hashlib
import hmac
from datetime import datetime, timezone
from urllib.parse import unquote

import pytest

from cosmosrest.auth.exceptions import InvalidConnectionStringError, InvalidMasterKeyError
from cosmosrest.auth.masterkey import (
    Credentials,
    authorization_headers,
    build_string_to_sign,
    format_date,
    parse_connection_string,
    parse_date,
    sign,
)

# Documented example from the Cosmos DB access control reference
DOC_KEY = "dsZQi3KtZmCv1ljt3VNWNm7sQUF1y5rJfC6kv5JiwvW0EndXdDku/dkKBp8/ufDToSxLzR4y+O/0H/t4bQtVNw=="
DOC_DATE = "Thu, 27 Apr 2017 00:51:12 GMT"
DOC_TOKEN = "type%3dmaster%26ver%3d1.0%26sig%3dc09PEVJrgp2uQRkr934kFbTqhByc7TVr3OHyqlu%2bc%2bc%3d"


def expected_token(method, resource_type, resource_link, date, key):
    """Independent computation of the token for comparison."""
    payload = f"{method.lower()}\n{resource_type}\n{resource_link}\n{date.lower()}\n\n"
    digest = hmac.new(key, payload.encode("utf-8"), hashlib.sha256).digest()
    return "type=master&ver=1.0&sig=" + base64.b64encode(digest).decode()


class TestStringToSign:
    """Test the canonical string layout."""

    def test_five_fields_with_trailing_newline(self):
        """Test method and date are lowercased and the last field is empty."""
        result = build_string_to_sign("GET", "colls", "dbs/MyDb", "Mon, 01 Jan 2018 00:00:00 GMT")

        assert result == "get\ncolls\ndbs/MyDb\nmon, 01 jan 2018 00:00:00 gmt\n\n"

    def test_resource_link_case_preserved(self):
        """Test resource type and link keep their case."""
        result = build_string_to_sign("post", "docs", "dbs/A/colls/B", "x")

        assert "dbs/A/colls/B" in result


class TestSign:
    """Test token computation."""

    def test_documented_vector(self):
        """Test the service's documented example reproduces its token."""
        key = base64.b64decode(DOC_KEY)

        token = sign("GET", "dbs", "dbs/ToDoList", DOC_DATE, key)

        assert unquote(token) == "type=master&ver=1.0&sig=c09PEVJrgp2uQRkr934kFbTqhByc7TVr3OHyqlu+c+c="
        assert token.lower() == DOC_TOKEN.lower()

    def test_collection_list_vector(self, master_key):
        """Test the colls listing example on dbs/mydb yields a fixed token."""
        date = "Mon, 01 Jan 2018 00:00:00 GMT"

        token = sign("GET", "colls", "dbs/mydb", date, master_key)

        assert token == "type%3Dmaster%26ver%3D1.0%26sig%3DKH1RRZlQItR%2FZAJITSg8bVTrOfl68cnZ80uf5qPl2Zo%3D"
        assert unquote(token) == expected_token("GET", "colls", "dbs/mydb", date, master_key)

    def test_token_is_percent_encoded(self, master_key):
        """Test the token contains no raw reserved characters."""
        token = sign("GET", "colls", "dbs/mydb", "Mon, 01 Jan 2018 00:00:00 GMT", master_key)

        assert token.startswith("type%3Dmaster%26ver%3D1.0%26sig%3D")
        for char in "=&+/":
            assert char not in token

    def test_deterministic(self, master_key):
        """Test identical inputs produce identical tokens."""
        args = ("GET", "colls", "dbs/mydb", "Mon, 01 Jan 2018 00:00:00 GMT", master_key)

        assert sign(*args) == sign(*args)

    @pytest.mark.parametrize("index,replacement", [
        (0, "POST"),
        (1, "docs"),
        (2, "dbs/otherdb"),
        (3, "Tue, 02 Jan 2018 00:00:00 GMT"),
        (4, b"another-key"),
    ])
    def test_any_input_change_changes_token(self, master_key, index, replacement):
        """Test changing any single input changes the token."""
        args = ["GET", "colls", "dbs/mydb", "Mon, 01 Jan 2018 00:00:00 GMT", master_key]
        original = sign(*args)

        args[index] = replacement

        assert sign(*args) != original

    def test_method_case_does_not_matter(self, master_key):
        """Test the method is lowercased before signing."""
        date = "Mon, 01 Jan 2018 00:00:00 GMT"

        assert sign("GET", "dbs", "", date, master_key) == sign("get", "dbs", "", date, master_key)


class TestDates:
    """Test x-ms-date formatting."""

    def test_format_date(self):
        """Test RFC 1123 formatting in UTC."""
        moment = datetime(2018, 1, 1, 0, 0, 0, tzinfo=timezone.utc)

        assert format_date(moment) == "Mon, 01 Jan 2018 00:00:00 GMT"

    def test_format_date_converts_to_utc(self):
        """Test aware datetimes in other zones are converted."""
        from datetime import timedelta

        moment = datetime(2018, 1, 1, 2, 0, 0, tzinfo=timezone(timedelta(hours=2)))

        assert format_date(moment) == "Mon, 01 Jan 2018 00:00:00 GMT"

    def test_parse_date_round_trip(self):
        """Test parse_date reverses format_date."""
        value = "Thu, 27 Apr 2017 00:51:12 GMT"

        assert format_date(parse_date(value)) == value

    def test_parse_date_rejects_other_formats(self):
        """Test non RFC 1123 values are rejected."""
        with pytest.raises(ValueError):
            parse_date("2018-01-01T00:00:00Z")


class TestAuthorizationHeaders:
    """Test header generation for a request."""

    def test_headers_share_the_signed_date(self, credentials, master_key):
        """Test x-ms-date is the exact date that was signed."""
        moment = datetime(2018, 1, 1, tzinfo=timezone.utc)

        headers = authorization_headers(credentials, "GET", "colls", "dbs/mydb", moment)

        assert headers["x-ms-date"] == "Mon, 01 Jan 2018 00:00:00 GMT"
        assert unquote(headers["Authorization"]) == expected_token(
            "GET", "colls", "dbs/mydb", headers["x-ms-date"], master_key
        )

    def test_defaults_to_now(self, credentials):
        """Test a date is generated when none is given."""
        headers = authorization_headers(credentials, "GET", "dbs", "")

        parsed = parse_date(headers["x-ms-date"])
        assert abs((datetime.now(timezone.utc) - parsed).total_seconds()) < 60


class TestCredentials:
    """Test credential construction."""

    def test_from_base64(self):
        """Test decoding the portal key."""
        credentials = Credentials.from_base64("acct", DOC_KEY)

        assert credentials.master_key == base64.b64decode(DOC_KEY)
        assert credentials.account_name == "acct"

    def test_from_base64_invalid(self):
        """Test an invalid key is rejected."""
        with pytest.raises(InvalidMasterKeyError):
            Credentials.from_base64("acct", "not base64!!")

    def test_repr_hides_key(self):
        """Test the master key never appears in repr."""
        credentials = Credentials.from_base64("acct", DOC_KEY)

        assert "master_key" not in repr(credentials)
        assert DOC_KEY not in repr(credentials)

    def test_immutable(self, credentials):
        """Test credentials cannot be modified."""
        with pytest.raises(Exception):
            credentials.account_name = "other"

    def test_from_connection_string(self):
        """Test account name and endpoint come from AccountEndpoint."""
        conn = f"AccountEndpoint=https://myacct.documents.azure.com:443/;AccountKey={DOC_KEY};"

        credentials = Credentials.from_connection_string(conn)

        assert credentials.account_name == "myacct"
        assert credentials.endpoint == "https://myacct.documents.azure.com:443/"
        assert credentials.master_key == base64.b64decode(DOC_KEY)

    def test_from_connection_string_missing_key(self):
        """Test AccountKey is required."""
        with pytest.raises(InvalidConnectionStringError):
            Credentials.from_connection_string("AccountEndpoint=https://myacct.documents.azure.com/;")

    def test_parse_connection_string_keeps_padding(self):
        """Test '=' inside values is preserved."""
        parts = parse_connection_string("AccountKey=abc==;AccountEndpoint=https://x/")

        assert parts == {"accountkey": "abc==", "accountendpoint": "https://x/"}

    def test_parse_connection_string_malformed(self):
        """Test segments without '=' are rejected."""
        with pytest.raises(InvalidConnectionStringError):
            parse_connection_string("AccountEndpoint=https://x/;garbage")

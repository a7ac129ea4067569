"""Tests for retrying operations that fail with 412 Precondition Failed."""

import pytest

from cosmosrest.services.cosmosdb.exceptions import (
    CosmosHTTPError,
    PreconditionFailedError,
    ResourceNotFoundError,
)
from cosmosrest.services.cosmosdb.resilience import (
    retry_on_precondition_failed,
    with_retry_on_precondition_failed,
)


class FlakyOperation:
    """Fails with the given errors, then returns a value."""

    def __init__(self, errors, result="ok"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


def conflict():
    return PreconditionFailedError(412, "PreconditionFailed", "etag changed")


class TestRetryOnPreconditionFailed:
    """Test the retry loop."""

    def test_success_first_try(self):
        """Test a successful operation runs once without sleeping."""
        sleeps = []
        operation = FlakyOperation([])

        result = retry_on_precondition_failed(operation, sleep=sleeps.append)

        assert result == "ok"
        assert operation.calls == 1
        assert sleeps == []

    def test_retries_until_success(self):
        """Test the result of the first success is returned."""
        sleeps = []
        operation = FlakyOperation([conflict(), conflict()], result=42)

        result = retry_on_precondition_failed(operation, sleep=sleeps.append)

        assert result == 42
        assert operation.calls == 3

    def test_linear_backoff(self):
        """Test delays grow with the attempt index."""
        sleeps = []
        operation = FlakyOperation([conflict(), conflict(), conflict()])

        retry_on_precondition_failed(operation, backoff=0.1, sleep=sleeps.append)

        assert sleeps == pytest.approx([0.0, 0.1, 0.2])

    def test_gives_up_after_max_attempts(self):
        """Test the last 412 is raised once attempts run out."""
        sleeps = []
        errors = [conflict() for _ in range(5)]
        operation = FlakyOperation(list(errors))

        with pytest.raises(PreconditionFailedError) as exc_info:
            retry_on_precondition_failed(operation, max_attempts=5, sleep=sleeps.append)

        assert operation.calls == 5
        assert exc_info.value is errors[-1]
        assert len(sleeps) == 4

    def test_other_errors_not_retried(self):
        """Test non-412 errors propagate after one call."""
        operation = FlakyOperation([ResourceNotFoundError(404)])

        with pytest.raises(ResourceNotFoundError):
            retry_on_precondition_failed(operation, sleep=lambda _: None)

        assert operation.calls == 1

    def test_plain_http_error_with_412_retried(self):
        """Test the status code decides, not the exception class."""
        sleeps = []
        operation = FlakyOperation([CosmosHTTPError(412) for _ in range(5)])

        with pytest.raises(CosmosHTTPError) as exc_info:
            retry_on_precondition_failed(operation, sleep=sleeps.append)

        assert exc_info.value.status_code == 412
        assert operation.calls == 5
        assert len(sleeps) == 4

    def test_plain_http_error_other_status_not_retried(self):
        """Test a generic service error with another status propagates."""
        operation = FlakyOperation([CosmosHTTPError(500)])

        with pytest.raises(CosmosHTTPError):
            retry_on_precondition_failed(operation, sleep=lambda _: None)

        assert operation.calls == 1

    def test_non_service_errors_not_retried(self):
        """Test arbitrary exceptions propagate unchanged."""
        operation = FlakyOperation([KeyError("x")])

        with pytest.raises(KeyError):
            retry_on_precondition_failed(operation, sleep=lambda _: None)

        assert operation.calls == 1

    def test_invalid_max_attempts(self):
        """Test at least one attempt is required."""
        with pytest.raises(ValueError):
            retry_on_precondition_failed(FlakyOperation([]), max_attempts=0)


class TestRetryDecorator:
    """Test the decorator form."""

    def test_decorated_function_retried(self):
        """Test arguments are passed on every attempt."""
        calls = []

        @with_retry_on_precondition_failed(max_attempts=3, sleep=lambda _: None)
        def update(name, value=0):
            calls.append((name, value))
            if len(calls) < 2:
                raise conflict()
            return value + 1

        assert update("counter", value=1) == 2
        assert calls == [("counter", 1), ("counter", 1)]
        assert update.__name__ == "update"

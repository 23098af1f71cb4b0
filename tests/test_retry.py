from unittest.mock import Mock, call, patch

import httpx
import pytest

from app.services.retry import (
    CHAT_RETRY_POLICY,
    FILE_RETRY_POLICY,
    RetryPolicy,
    call_with_retry,
    exponential_backoff,
    linear_backoff,
)


def _responses(*statuses):
    return [Mock(status_code=status) for status in statuses]


class TestBackoff:
    def test_exponential(self):
        assert [exponential_backoff(n) for n in (1, 2, 3)] == [2.0, 4.0, 8.0]

    def test_linear(self):
        assert [linear_backoff(n) for n in (1, 2, 3)] == [1.0, 2.0, 3.0]


@patch("app.services.retry.time.sleep")
class TestCallWithRetry:
    def test_first_success_does_not_sleep(self, mock_sleep):
        func = Mock(side_effect=_responses(200))

        result = call_with_retry(func, CHAT_RETRY_POLICY, status_of=lambda r: r.status_code)

        assert result.status_code == 200
        func.assert_called_once()
        mock_sleep.assert_not_called()

    def test_retries_unavailable_then_succeeds(self, mock_sleep):
        func = Mock(side_effect=_responses(503, 503, 200))

        result = call_with_retry(func, CHAT_RETRY_POLICY, status_of=lambda r: r.status_code)

        assert result.status_code == 200
        assert func.call_count == 3
        assert mock_sleep.call_args_list == [call(2.0), call(4.0)]

    def test_returns_last_result_when_attempts_run_out(self, mock_sleep):
        func = Mock(side_effect=_responses(500, 503, 500))

        result = call_with_retry(func, CHAT_RETRY_POLICY, status_of=lambda r: r.status_code)

        assert result.status_code == 500
        assert func.call_count == 3
        assert mock_sleep.call_count == 2

    def test_quota_error_is_not_retried(self, mock_sleep):
        func = Mock(side_effect=_responses(429))

        result = call_with_retry(func, CHAT_RETRY_POLICY, status_of=lambda r: r.status_code)

        assert result.status_code == 429
        func.assert_called_once()
        mock_sleep.assert_not_called()

    def test_file_policy_uses_linear_backoff(self, mock_sleep):
        func = Mock(side_effect=_responses(503, 500, 200))

        call_with_retry(func, FILE_RETRY_POLICY, status_of=lambda r: r.status_code)

        assert mock_sleep.call_args_list == [call(1.0), call(2.0)]

    def test_transport_error_is_retried_then_reraised(self, mock_sleep):
        func = Mock(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(httpx.ConnectError):
            call_with_retry(func, CHAT_RETRY_POLICY, status_of=lambda r: r.status_code)

        assert func.call_count == 3
        assert mock_sleep.call_count == 2

    def test_transport_error_then_success(self, mock_sleep):
        func = Mock(side_effect=[httpx.ReadTimeout("timed out"), Mock(status_code=200)])

        result = call_with_retry(func, CHAT_RETRY_POLICY, status_of=lambda r: r.status_code)

        assert result.status_code == 200
        mock_sleep.assert_called_once_with(2.0)

    def test_other_exceptions_propagate_immediately(self, mock_sleep):
        func = Mock(side_effect=ValueError("bad json"))

        with pytest.raises(ValueError):
            call_with_retry(func, CHAT_RETRY_POLICY, status_of=lambda r: r.status_code)

        func.assert_called_once()
        mock_sleep.assert_not_called()

    def test_rejects_zero_attempts(self, mock_sleep):
        with pytest.raises(ValueError):
            call_with_retry(Mock(), RetryPolicy(attempts=0), status_of=lambda r: r)

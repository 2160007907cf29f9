import pytest

from src.conversion.stream_classifier import OutcomeKind, classify_terminal


@pytest.mark.unit
class TestClassifyTerminal:
    def test_done_sentinel_is_success(self):
        assert classify_terminal("[DONE]") is OutcomeKind.SUCCESS
        assert classify_terminal("  [DONE]\n") is OutcomeKind.SUCCESS

    @pytest.mark.parametrize(
        "payload, expected",
        [
            ('{"error": "You have reached your usage limit"}', OutcomeKind.QUOTA_EXCEEDED),
            ('{"error": "Internal Server Error"}', OutcomeKind.UPSTREAM_SERVER_ERROR),
            ('{"message": "User is not logged in"}', OutcomeKind.NOT_AUTHENTICATED),
            ('{"message": "Rate limit exceeded"}', OutcomeKind.RATE_LIMITED),
            ('{"message": "TOO MANY REQUESTS"}', OutcomeKind.RATE_LIMITED),
        ],
    )
    def test_markers(self, payload, expected):
        assert classify_terminal(payload) is expected

    def test_quota_wins_over_rate_limit(self):
        payload = "usage limit reached; rate limit applies until reset"
        assert classify_terminal(payload) is OutcomeKind.QUOTA_EXCEEDED

    def test_server_error_wins_over_not_logged_in(self):
        payload = "internal server error: unauthorized backend call"
        assert classify_terminal(payload) is OutcomeKind.UPSTREAM_SERVER_ERROR

    @pytest.mark.parametrize(
        "status, expected",
        [
            (429, OutcomeKind.RATE_LIMITED),
            (401, OutcomeKind.NOT_AUTHENTICATED),
            (402, OutcomeKind.QUOTA_EXCEEDED),
            (500, OutcomeKind.UPSTREAM_SERVER_ERROR),
            (503, OutcomeKind.UPSTREAM_SERVER_ERROR),
            (400, OutcomeKind.UNKNOWN),
            (200, OutcomeKind.UNKNOWN),
        ],
    )
    def test_status_fallbacks(self, status, expected):
        assert classify_terminal('{"detail": "nope"}', status) is expected

    def test_markers_take_precedence_over_status(self):
        assert classify_terminal("rate limit", 500) is OutcomeKind.RATE_LIMITED

"""
Tests for the Sentry integration.
"""

from unittest.mock import MagicMock, patch

from boards.monitoring.sentry_integration import (
    _filter_sensitive_data,
    add_coalesce_breadcrumb,
    capture_coalesce_error,
)


class TestFilterSensitiveData:
    def test_filters_nested_keys(self):
        filtered = _filter_sensitive_data(
            {"boards": 3, "api_key": "abc", "headers": {"Authorization": "Bearer x", "accept": "json"}}
        )

        assert filtered == {
            "boards": 3,
            "api_key": "[Filtered]",
            "headers": {"Authorization": "[Filtered]", "accept": "json"},
        }

    def test_non_dict_passthrough(self):
        assert _filter_sensitive_data("plain") == "plain"


class TestBreadcrumbs:
    def test_breadcrumb_carries_run_and_stage(self):
        with patch("boards.monitoring.sentry_integration.sentry_sdk") as mock_sentry:
            add_coalesce_breadcrumb("Coalesced records", run_id="run-1", extra_data={"boards": 2})

        kwargs = mock_sentry.add_breadcrumb.call_args.kwargs
        assert kwargs["category"] == "boards"
        assert kwargs["data"] == {"run_id": "run-1", "stage": "coalesce", "boards": 2}

    def test_sdk_failure_is_logged_not_raised(self, caplog):
        with patch("boards.monitoring.sentry_integration.sentry_sdk") as mock_sentry:
            mock_sentry.add_breadcrumb.side_effect = RuntimeError("sdk down")
            add_coalesce_breadcrumb("Coalesced records")

        assert "Failed to add Sentry breadcrumb" in caplog.text


class TestCaptureError:
    def test_captures_with_scope(self):
        scope = MagicMock()
        with patch("boards.monitoring.sentry_integration.sentry_sdk") as mock_sentry:
            mock_sentry.new_scope.return_value.__enter__.return_value = scope
            error = ValueError("bad record")

            capture_coalesce_error(
                error,
                run_id="run-1",
                stage="ingest",
                board_key="burton|custom|unisex",
                extra_context={"token": "secret"},
            )

        mock_sentry.capture_exception.assert_called_once_with(error)
        scope.set_tag.assert_called_once_with("boards.stage", "ingest")
        scope.set_extra.assert_any_call("board_key", "burton|custom|unisex")
        scope.set_extra.assert_any_call("boards_context", {"token": "[Filtered]"})
        assert mock_sentry.add_breadcrumb.call_args.kwargs["level"] == "error"

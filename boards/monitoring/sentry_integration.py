"""
Sentry error tracking integration for board coalescing.

- Configures nothing itself (the SDK is initialized in settings/base.py)
- Adds breadcrumbs for coalescing context (run, stage, counts)
- Filters sensitive data (cookies, API keys)
- Captures exceptions with run context

Usage:
    from boards.monitoring import capture_coalesce_error, add_coalesce_breadcrumb

    try:
        result = coalesce(records, run_id=run_id)
    except Exception as e:
        capture_coalesce_error(e, run_id=run_id, stage="coalesce")
        raise
"""

import logging
from typing import Any, Dict, Optional

import sentry_sdk

logger = logging.getLogger(__name__)

# Sensitive fields to filter from Sentry events
SENSITIVE_FIELDS = {
    "cookies",
    "cookie",
    "api_key",
    "apikey",
    "api-key",
    "authorization",
    "auth",
    "password",
    "secret",
    "token",
    "x-api-key",
}


def _filter_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Filter sensitive data from a dictionary.

    Replaces values for keys that match sensitive field names, recursing
    into nested dicts.
    """
    if not isinstance(data, dict):
        return data

    filtered = {}
    for key, value in data.items():
        key_lower = str(key).lower()
        if any(sensitive in key_lower for sensitive in SENSITIVE_FIELDS):
            filtered[key] = "[Filtered]"
        elif isinstance(value, dict):
            filtered[key] = _filter_sensitive_data(value)
        else:
            filtered[key] = value
    return filtered


def add_coalesce_breadcrumb(
    message: str,
    run_id: Optional[str] = None,
    stage: str = "coalesce",
    level: str = "info",
    extra_data: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Add a breadcrumb to Sentry for coalescing context.

    Args:
        message: Description of the operation
        run_id: Search run the operation belongs to
        stage: Pipeline stage (identify, coalesce, ingest, persist)
        level: Log level (info, warning, error)
        extra_data: Additional context data
    """
    breadcrumb_data = {"run_id": str(run_id) if run_id else None, "stage": stage}
    if extra_data:
        breadcrumb_data.update(_filter_sensitive_data(extra_data))

    try:
        sentry_sdk.add_breadcrumb(
            category="boards",
            message=message,
            level=level,
            data=breadcrumb_data,
        )
    except Exception as e:
        logger.warning(f"Failed to add Sentry breadcrumb: {e}")


def capture_coalesce_error(
    error: Exception,
    run_id: Optional[str] = None,
    stage: str = "coalesce",
    board_key: Optional[str] = None,
    extra_context: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Capture a coalescing error to Sentry with run context.

    Args:
        error: The exception that occurred
        run_id: Search run being processed
        stage: Pipeline stage the error happened in
        board_key: Board being processed, if known
        extra_context: Additional context (filtered for sensitive data)
    """
    add_coalesce_breadcrumb(
        message=f"Error: {type(error).__name__}",
        run_id=run_id,
        stage=stage,
        level="error",
        extra_data=extra_context,
    )

    try:
        with sentry_sdk.new_scope() as scope:
            scope.set_tag("boards.stage", stage)
            if run_id:
                scope.set_extra("run_id", str(run_id))
            if board_key:
                scope.set_extra("board_key", board_key)
            if extra_context:
                scope.set_extra("boards_context", _filter_sensitive_data(extra_context))
            sentry_sdk.capture_exception(error)
    except Exception as e:
        logger.warning(f"Failed to capture exception to Sentry: {e}")

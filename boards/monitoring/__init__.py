"""
Monitoring module for board coalescing.

- Sentry breadcrumbs for coalescing and ingestion runs
- Error capture with run context
"""

from .sentry_integration import add_coalesce_breadcrumb, capture_coalesce_error

__all__ = [
    "add_coalesce_breadcrumb",
    "capture_coalesce_error",
]

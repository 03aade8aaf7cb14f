"""Asana integration: REST client, custom field mapping and comment filtering."""

from maritime_tracking.asana.client import (
    AsanaAPIError,
    AsanaClient,
    AsanaConfigurationError,
    AsanaRateLimitError,
    ProjectNotFoundError,
    TaskBatch,
    get_asana_client,
)
from maritime_tracking.asana.comments import TaskComment, filter_sentinel_comments
from maritime_tracking.asana.field_mapper import (
    FIELD_MAPPINGS,
    CustomField,
    CustomFieldValue,
    FieldKind,
    find_field_value,
    parse_multi_value,
)

__all__ = [
    "FIELD_MAPPINGS",
    "AsanaAPIError",
    "AsanaClient",
    "AsanaConfigurationError",
    "AsanaRateLimitError",
    "CustomField",
    "CustomFieldValue",
    "FieldKind",
    "ProjectNotFoundError",
    "TaskBatch",
    "TaskComment",
    "filter_sentinel_comments",
    "find_field_value",
    "get_asana_client",
    "parse_multi_value",
]

"""Utility modules."""
from api.utils.time_utils import parse_iso_timestamp, utc_now
from api.utils.validation import quiz_error_to_http, validate_id

__all__ = [
    "parse_iso_timestamp",
    "utc_now",
    "quiz_error_to_http",
    "validate_id",
]

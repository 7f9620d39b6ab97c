"""Utility modules."""

from storage_core.utils.content_type import guess_content_type
from storage_core.utils.paths import join_path, normalize_path, split_full_path
from storage_core.utils.validation import (
    ValidationResult,
    check_filename,
    check_path,
    validate_filename,
    validate_path,
)

__all__ = [
    "ValidationResult",
    "check_filename",
    "check_path",
    "guess_content_type",
    "join_path",
    "normalize_path",
    "split_full_path",
    "validate_filename",
    "validate_path",
]

"""
This facade exposes the public API for the scanner module.
Other parts of the application should only import from here,
not from internal modules.
"""
from .facade import find_files
from .config import DEFAULT_IGNORE_PATTERNS, validate_file_pattern, validate_root_path

__all__ = ["find_files", "DEFAULT_IGNORE_PATTERNS", "validate_file_pattern", "validate_root_path"]

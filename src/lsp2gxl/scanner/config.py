from pathlib import Path
from typing import List, Optional

from lsp2gxl.exceptions import ConfigError

# Directories and files never handed to the language server
DEFAULT_IGNORE_PATTERNS = [
    ".git/",
    ".hg/",
    ".svn/",
    "__pycache__/",
    ".pytest_cache/",
    ".mypy_cache/",
    ".tox/",
    ".venv/",
    "venv/",
    "node_modules/",
    ".lsp2gxl/",
    "*.egg-info/",
]


def validate_file_pattern(pattern: Optional[str]) -> str:
    """
    Validate the glob selecting source files, relative to the root.

    Args:
        pattern: gitignore-style pattern such as '**/*.py'.

    Returns:
        The pattern, stripped.

    Raises:
        ConfigError: If no pattern is given or it is blank.
    """
    if pattern is None:
        raise ConfigError("No file pattern provided")
    if not isinstance(pattern, str):
        raise ConfigError(f"Invalid file pattern: {pattern!r} (must be a string)")
    if not pattern.strip():
        raise ConfigError("File pattern cannot be empty or whitespace-only")
    return pattern.strip()


def validate_root_path(root_path: Path) -> Path:
    """
    Raises:
        ConfigError: If the root path is not an existing directory.
    """
    root_path = Path(root_path)
    if not root_path.is_dir():
        raise ConfigError(f"Root path '{root_path}' is not a directory")
    return root_path.resolve()


def validate_ignore_patterns(patterns: List[str]) -> None:
    """
    Raises:
        ConfigError: If patterns are not a list of non-blank strings.
    """
    if not isinstance(patterns, list):
        raise ConfigError("Ignore patterns must be a list of strings")

    for pattern in patterns:
        if not isinstance(pattern, str):
            raise ConfigError(f"Invalid ignore pattern: {pattern} (must be a string)")
        if not pattern.strip():
            raise ConfigError("Ignore patterns cannot be empty or whitespace-only")

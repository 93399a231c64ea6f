import os
from pathlib import Path
from typing import List, Optional

import pathspec

from lsp2gxl.logging_config import logger
from lsp2gxl.tracing import trace
from .config import DEFAULT_IGNORE_PATTERNS, validate_file_pattern, validate_ignore_patterns, validate_root_path


@trace
def find_files(
    root_path: Path,
    file_pattern: str,
    ignore_patterns: Optional[List[str]] = None,
) -> List[Path]:
    """
    Finds the source files under a root that match a glob pattern.

    Args:
        root_path: The directory to search. Matching is relative to it.
        file_pattern: gitignore-style pattern selecting files (e.g. '**/*.py').
        ignore_patterns: Patterns for files and directories to skip.
                         Defaults to DEFAULT_IGNORE_PATTERNS.

    Returns:
        Absolute paths of the matching files, sorted by relative path.

    Raises:
        ConfigError: If the root is not a directory or a pattern is invalid.
    """
    root_path = validate_root_path(root_path)
    file_pattern = validate_file_pattern(file_pattern)
    if ignore_patterns is None:
        ignore_patterns = DEFAULT_IGNORE_PATTERNS
    validate_ignore_patterns(ignore_patterns)

    selected = pathspec.PathSpec.from_lines("gitignore", [file_pattern])
    ignored = pathspec.PathSpec.from_lines("gitignore", ignore_patterns)
    logger.debug(f"Scanning '{root_path}' for '{file_pattern}' with {len(ignore_patterns)} ignore patterns")

    found: List[Path] = []
    for root, dirs, files in os.walk(root_path):
        current = Path(root)
        relative_dir = current.relative_to(root_path)

        # Prune ignored directories in place so os.walk never descends into them.
        kept = []
        for d in sorted(dirs):
            dir_path_to_check = (relative_dir / d).as_posix() + "/"
            if ignored.match_file(dir_path_to_check):
                logger.debug(f"Ignoring directory '{dir_path_to_check}' due to ignore rules.")
            else:
                kept.append(d)
        dirs[:] = kept

        for file_name in files:
            relative_path = (relative_dir / file_name).as_posix()
            if ignored.match_file(relative_path):
                continue
            if selected.match_file(relative_path):
                found.append(current / file_name)

    found.sort(key=lambda path: path.relative_to(root_path).as_posix())
    logger.info(f"Found {len(found)} files matching '{file_pattern}' under '{root_path}'")
    return found

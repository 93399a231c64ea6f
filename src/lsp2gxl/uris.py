from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname


def path_to_uri(path: Path) -> str:
    """file:// URI for an absolute path."""
    return Path(path).as_uri()


def uri_to_path(uri: str) -> Path:
    """Inverse of path_to_uri, percent-decoding included."""
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        raise ValueError(f"Not a file URI: {uri}")
    return Path(url2pathname(parsed.path))

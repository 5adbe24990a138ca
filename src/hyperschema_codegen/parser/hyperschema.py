"""Loading hyperschema documents from disk or over HTTP."""

import logging
from pathlib import Path

import requests
import yaml

from hyperschema_codegen.config import DEFAULT_FETCH_TIMEOUT

logger = logging.getLogger(__name__)


def is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def download_hyperschema(url: str, timeout: float = DEFAULT_FETCH_TIMEOUT) -> dict:
    """Fetch a hyperschema, fully buffered. No retries are attempted."""
    logger.info("Downloading hyperschema from %s", url)
    response = requests.get(url, timeout=timeout, headers={"Accept": "application/json"})
    response.raise_for_status()
    return response.json()


def read_hyperschema(file_path: Path) -> dict:
    """Read a hyperschema from a JSON or YAML file."""
    text = file_path.read_text(encoding="utf-8")
    # JSON is a subset of YAML
    return yaml.safe_load(text)


def load_hyperschema(location: str | Path, timeout: float = DEFAULT_FETCH_TIMEOUT) -> dict:
    if isinstance(location, str) and is_url(location):
        return download_hyperschema(location, timeout=timeout)
    return read_hyperschema(Path(location))

"""Fetching rule documents from local paths or HTTP(S) URIs."""

import json
import urllib.parse
from decimal import Decimal
from pathlib import Path
from typing import Any

import requests

from .errors import RuleDocumentError


class RuleFetcher:
    """Reads and parses JSON rule documents. Nothing is cached."""

    def __init__(self, timeout: float = 10):
        """
        Initialize rule fetcher.

        Args:
            timeout: Seconds to wait on remote requests
        """
        self.timeout = timeout

    def fetch_document(self, uri: str) -> Any:
        """
        Fetch and parse one JSON document.

        Logic:
        1. If file:// or plain path → read from disk
        2. If http(s):// → GET with timeout

        Args:
            uri: Document URI or path

        Returns:
            Parsed JSON

        Raises:
            RuleDocumentError: If the document cannot be fetched or parsed
        """
        parsed = urllib.parse.urlparse(uri)

        if parsed.scheme in ("http", "https"):
            content = self._fetch_uri(uri)
        elif parsed.scheme == "file":
            content = self._read_file(Path(urllib.parse.unquote(parsed.path)))
        elif not parsed.scheme:
            content = self._read_file(Path(uri))
        else:
            raise RuleDocumentError(uri, f"Unsupported URI scheme: {parsed.scheme}")

        try:
            return json.loads(content, parse_float=Decimal)
        except json.JSONDecodeError as e:
            raise RuleDocumentError(uri, f"Malformed JSON: {e}") from e

    def exists(self, uri: str) -> bool:
        """True if a local document exists. Remote documents are assumed present."""
        parsed = urllib.parse.urlparse(uri)
        if parsed.scheme in ("http", "https"):
            return True
        if parsed.scheme == "file":
            return Path(urllib.parse.unquote(parsed.path)).is_file()
        return Path(uri).is_file()

    def _read_file(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise RuleDocumentError(str(path), f"Cannot read file: {e}") from e

    def _fetch_uri(self, uri: str) -> str:
        """Fetch content from HTTP/HTTPS URI."""
        try:
            response = requests.get(uri, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise RuleDocumentError(uri, f"Failed to fetch: {e}") from e
        return response.text

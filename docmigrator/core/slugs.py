"""Read-only source-key -> destination-slug table."""
from __future__ import annotations
import json
import re
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Tuple, Union

from docmigrator.core.errors import SlugResolutionError


class _Missing:
    """Sentinel for keys the table has never heard of."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

Resolution = Union[str, None, _Missing]

SOURCE_PATH_RE = re.compile(r"^https?://[^/]+/w/(.+?)\.html?$")


def key_from_url(url: str) -> str:
    """``https://en.cppreference.com/w/cpp/comments.html`` -> ``cpp/comments``."""
    match = SOURCE_PATH_RE.match(url.strip())
    if not match:
        raise SlugResolutionError(f"Could not derive a source key from URL: {url}")
    return match.group(1)


class SlugResolver:
    """Immutable lookup built once per run and shared by every job."""

    def __init__(self, entries: Mapping[str, Optional[str]]):
        self._table = MappingProxyType(dict(entries))

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "SlugResolver":
        return cls({r["cppref"]: r.get("cppdoc") for r in records})

    @classmethod
    def load(cls, path: Path) -> "SlugResolver":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(data, dict):
            return cls(data)
        return cls.from_records(data)

    @property
    def table(self) -> Mapping[str, Optional[str]]:
        return self._table

    def __contains__(self, key: str) -> bool:
        return key in self._table

    def __len__(self) -> int:
        return len(self._table)

    def items(self) -> Iterator[Tuple[str, Optional[str]]]:
        return iter(self._table.items())

    def resolve(self, key: str) -> Resolution:
        """Destination path, ``None`` if intentionally unmapped, ``MISSING`` if unknown."""
        return self._table.get(key, MISSING)

    def output_path(self, key: str) -> str:
        """Destination for a job's own document; anything but a real mapping is fatal."""
        dest = self.resolve(key)
        if dest is MISSING:
            raise SlugResolutionError(f"No slug mapping for '{key}'")
        if dest is None:
            raise SlugResolutionError(f"'{key}' is intentionally unmapped")
        return dest

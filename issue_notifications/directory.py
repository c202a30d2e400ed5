"""Static mapping from tracker logins to messenger destinations.

The directory holds four independent ``login -> destination`` tables, one per
:class:`~issue_notifications.models.Category`. A login may appear in any number
of them; absence from a table means the user is not interested in that kind of
notification and is skipped without error.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .models import Category

LOGGER = logging.getLogger(__name__)


class DirectoryError(ValueError):
    """Raised when directory configuration cannot be read or is malformed."""


@dataclass(frozen=True, slots=True)
class RecipientDirectory:
    tables: Mapping[Category, Mapping[str, str]] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "RecipientDirectory":
        if not isinstance(raw, Mapping):
            raise DirectoryError("directory configuration must be an object")
        tables: Dict[Category, Dict[str, str]] = {}
        for category in Category:
            entries = raw.get(category.value) or {}
            if not isinstance(entries, Mapping):
                raise DirectoryError(f"'{category.value}' must map logins to destinations")
            table: Dict[str, str] = {}
            for login, destination in entries.items():
                if destination is None or destination == "":
                    continue
                table[str(login)] = str(destination)
            tables[category] = table
        unknown = set(raw) - {category.value for category in Category}
        if unknown:
            LOGGER.warning("Ignoring unknown directory sections: %s", ", ".join(sorted(unknown)))
        return cls(tables=tables)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "RecipientDirectory":
        try:
            with open(path, "r", encoding="utf-8") as handle:
                raw = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise DirectoryError(f"Cannot read recipient directory {path}: {exc}") from exc
        directory = cls.from_mapping(raw)
        LOGGER.info(
            "Loaded recipient directory from %s (%s)",
            path,
            ", ".join(f"{c.value}={len(directory.table(c))}" for c in Category),
        )
        return directory

    def table(self, category: Category) -> Mapping[str, str]:
        return self.tables.get(category, {})

    def lookup(self, login: Optional[str], *categories: Category) -> Optional[str]:
        """Destination for login, later categories overriding earlier ones."""
        if not login:
            return None
        found = None
        for category in categories:
            destination = self.table(category).get(login)
            if destination is not None:
                found = destination
        return found

    def resolve(self, logins: Iterable[Optional[str]], *categories: Category) -> List[str]:
        """Deduplicated destinations of the logins present in the given categories.

        Logins missing from every category are dropped silently.
        """
        destinations: Dict[str, None] = {}
        for login in logins:
            destination = self.lookup(login, *categories)
            if destination is not None:
                destinations.setdefault(destination)
        return list(destinations)


def merge_recipients(*groups: Iterable[str]) -> List[str]:
    """Concatenate recipient lists keeping only the first occurrence of each."""
    merged: Dict[str, None] = {}
    for group in groups:
        for destination in group:
            merged.setdefault(destination)
    return list(merged)

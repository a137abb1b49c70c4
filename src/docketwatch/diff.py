from __future__ import annotations

from typing import Iterable

from docketwatch.types import ScrapedDocketEntry

# ASCII unit separator; never present in text rendered inside a table cell.
KEY_SEPARATOR = "\x1f"


def identity_key(date: str, event: str, filer: str) -> str:
    return KEY_SEPARATOR.join((date, event, filer))


def entry_key(entry: ScrapedDocketEntry) -> str:
    return identity_key(entry.date, entry.event, entry.filer)


def diff_entries(
    scraped: Iterable[ScrapedDocketEntry],
    existing: Iterable[tuple[str, str, str]],
) -> list[ScrapedDocketEntry]:
    """
    Return scraped entries whose (date, event, filer) key has not been seen before.

    The result keeps the table's top-to-bottom order. A row repeated within one scrape is reported
    once, since it maps to a single persisted row.
    """

    seen = {identity_key(*triple) for triple in existing}
    new_entries: list[ScrapedDocketEntry] = []
    for entry in scraped:
        key = entry_key(entry)
        if key in seen:
            continue
        seen.add(key)
        new_entries.append(entry)
    return new_entries

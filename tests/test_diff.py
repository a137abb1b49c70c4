from __future__ import annotations

from docketwatch.diff import KEY_SEPARATOR, diff_entries, identity_key
from docketwatch.types import ScrapedDocketEntry


def _entry(date: str, event: str, filer: str = "Clerk", target: str | None = None) -> ScrapedDocketEntry:
    return ScrapedDocketEntry(date, event, filer, has_pdf=target is not None, pdf_postback_target=target)


def test_identity_key_is_unambiguous():
    assert identity_key("a|b", "c", "d") != identity_key("a", "b|c", "d")
    assert identity_key("01/01/2024", "Filed", "Clerk").count(KEY_SEPARATOR) == 2


def test_only_unseen_entries_are_new_in_scrape_order():
    scraped = [
        _entry("01/01/2024", "Notice"),
        _entry("02/01/2024", "Brief", "Appellant", "ctl$1"),
        _entry("03/01/2024", "Record"),
        _entry("04/01/2024", "Reply"),
    ]
    existing = [("01/01/2024", "Notice", "Clerk"), ("03/01/2024", "Record", "Clerk")]

    new_entries = diff_entries(scraped, existing)

    assert new_entries == [scraped[1], scraped[3]]


def test_filer_is_part_of_the_key():
    scraped = [_entry("01/01/2024", "Motion", "Appellee")]
    existing = [("01/01/2024", "Motion", "Appellant")]

    assert diff_entries(scraped, existing) == scraped


def test_second_diff_with_applied_result_is_empty():
    scraped = [_entry("01/01/2024", "Notice"), _entry("02/01/2024", "Brief")]

    first = diff_entries(scraped, [])
    persisted = [(e.date, e.event, e.filer) for e in first]

    assert diff_entries(scraped, persisted) == []


def test_duplicate_rows_within_one_scrape_reported_once():
    scraped = [_entry("01/01/2024", "Notice"), _entry("01/01/2024", "Notice")]

    assert len(diff_entries(scraped, [])) == 1


def test_empty_scrape_has_no_new_entries():
    assert diff_entries([], [("01/01/2024", "Notice", "Clerk")]) == []

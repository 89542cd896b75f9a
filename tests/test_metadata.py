"""Tests for sandbox gallery metadata parsing."""

from datetime import datetime

import pytest

from sandbox_inventory.analyzers.metadata import (
    author_display_name,
    build_row,
    format_created,
    has_assemblies,
    is_activated,
)
from sandbox_inventory.models import SiteCollection, SolutionItem


class TestIsActivated:
    @pytest.mark.parametrize("status", ["Activated", "1", {"Id": 1}, 1])
    def test_present_status_is_activated(self, status):
        assert is_activated(status) == 1

    @pytest.mark.parametrize("status", [None, "", {}])
    def test_absent_status_is_not_activated(self, status):
        assert is_activated(status) == 0


class TestHasAssemblies:
    def test_marker_line_with_one(self):
        assert has_assemblies("A: x\r\nSolutionHasAssemblies: 1\r\nB: y") == 1

    def test_marker_line_with_zero(self):
        assert has_assemblies("SolutionHasAssemblies: 0") == 0

    def test_no_marker_line(self):
        assert has_assemblies("A: x\r\nB: 1") == 0

    def test_missing_blob(self):
        assert has_assemblies(None) == 0
        assert has_assemblies("") == 0

    def test_first_marker_line_wins(self):
        blob = "SolutionHasAssemblies: 0\r\nSolutionHasAssemblies: 1"
        assert has_assemblies(blob) == 0

    def test_any_one_on_marker_line_counts(self):
        # e.g. "vti_solutionhasassemblies" style lines carrying a version number
        assert has_assemblies("SolutionHasAssemblies:SW|0 v1") == 1

    def test_lines_split_only_on_crlf(self):
        # A bare LF does not start a new line, so the "1" shares the marker line.
        assert has_assemblies("SolutionHasAssemblies: 0\nOther: 1") == 1


class TestAuthorDisplayName:
    def test_commas_stripped(self):
        assert author_display_name({"Title": "Smith, John"}) == "Smith John"

    def test_missing_lookup(self):
        assert author_display_name(None) == ""
        assert author_display_name({}) == ""
        assert author_display_name({"Title": None}) == ""

    def test_plain_string(self):
        assert author_display_name("Doe,, Jane") == "Doe Jane"


class TestFormatCreated:
    def test_iso_utc(self):
        assert format_created("2015-03-10T12:30:00Z") == "2015-03-10 12:30:00"

    def test_datetime(self):
        assert format_created(datetime(2020, 1, 2, 3, 4, 5)) == "2020-01-02 03:04:05"

    def test_unparseable_passes_through(self):
        assert format_created("last tuesday") == "last tuesday"

    def test_missing(self):
        assert format_created(None) == ""


def test_build_row():
    site = SiteCollection(url="https://contoso.sharepoint.com/sites/hr")
    item = SolutionItem.from_list_item({
        "FileLeafRef": "HRTools.wsp",
        "Author": {"Title": "Smith, John"},
        "Created": "2014-06-01T08:00:00Z",
        "Status": "Activated",
        "MetaInfo": "vti_x: y\r\nSolutionHasAssemblies: 1",
        "SolutionHash": "abc123",
    })

    row = build_row(site, item)

    assert row.fields() == [
        "https://contoso.sharepoint.com/sites/hr",
        "HRTools.wsp",
        "Smith John",
        "2014-06-01 08:00:00",
        "1",
        "1",
        "abc123",
    ]


def test_from_list_item_requires_file_name():
    with pytest.raises(KeyError):
        SolutionItem.from_list_item({"Created": "2014-06-01T08:00:00Z"})


def test_from_list_item_defaults():
    item = SolutionItem.from_list_item({"FileLeafRef": "a.wsp"})
    assert item.solution_hash == ""
    assert item.status is None
    assert item.meta_info is None

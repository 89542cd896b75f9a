"""Tests for the streaming CSV report writer."""

import pytest

from sandbox_inventory.models import ReportRow
from sandbox_inventory.reporting import ReportWriter


def _row(name="a.wsp", author="Admin"):
    return ReportRow(
        site_url="https://contoso.sharepoint.com/sites/a",
        wsp_name=name,
        author=author,
        created_date="2015-03-10 12:30:00",
        activated=1,
        has_assemblies=0,
        solution_hash="h1",
    )


def _lines(path):
    return path.read_text(encoding="utf-8-sig").splitlines()


def test_header_written_on_open(tmp_path):
    path = tmp_path / "SandboxReport_1.csv"
    with ReportWriter(path, echo=False):
        pass

    assert _lines(path) == [
        "SiteURL,WSPName,Author,CreatedDate,Activated,HasAssemblies,SolutionHash"
    ]


def test_rows_appended_in_order(tmp_path, capsys):
    path = tmp_path / "report.csv"
    with ReportWriter(path) as writer:
        writer.write_rows([_row("a.wsp"), _row("b.wsp")])
        assert writer.rows_written == 2

    lines = _lines(path)
    assert lines[1] == "https://contoso.sharepoint.com/sites/a,a.wsp,Admin,2015-03-10 12:30:00,1,0,h1"
    assert lines[2].split(",")[1] == "b.wsp"

    out = capsys.readouterr().out
    assert lines[1] in out
    assert lines[2] in out


def test_rows_visible_before_close(tmp_path):
    path = tmp_path / "report.csv"
    with ReportWriter(path, echo=False) as writer:
        writer.write_row(_row())
        assert len(_lines(path)) == 2


def test_custom_delimiter_applies_to_header_and_rows(tmp_path):
    path = tmp_path / "report.csv"
    with ReportWriter(path, delimiter=";", echo=False) as writer:
        writer.write_row(_row())

    header, row = _lines(path)
    assert header == "SiteURL;WSPName;Author;CreatedDate;Activated;HasAssemblies;SolutionHash"
    assert row.count(";") == 6
    assert "," not in row


def test_no_quoting_of_values(tmp_path):
    path = tmp_path / "report.csv"
    with ReportWriter(path, echo=False) as writer:
        writer.write_row(_row(name='odd "name".wsp'))

    assert 'odd "name".wsp' in _lines(path)[1]


def test_write_requires_open(tmp_path):
    writer = ReportWriter(tmp_path / "report.csv", echo=False)
    with pytest.raises(RuntimeError):
        writer.write_row(_row())

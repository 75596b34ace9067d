"""CLI tests using click's CliRunner."""

from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from markslides.cli import main


def _write(path: Path, md: str) -> Path:
    path.write_text(md, encoding="utf-8")
    return path


def test_cli_renders_html(tmp_path: Path) -> None:
    src = _write(tmp_path / "intro.md", "# Intro\n## Welcome\nHello **there**\n")
    out = tmp_path / "build" / "index.html"

    result = CliRunner().invoke(main, [str(src), "-o", str(out), "--title1", "Course"])

    assert result.exit_code == 0, result.output
    assert f"Rendered: {out}" in result.output
    html = out.read_text(encoding="utf-8")
    assert "<title>Course</title>" in html
    assert "<strong>there</strong>" in html


def test_cli_keeps_file_order_and_counters(tmp_path: Path) -> None:
    first = _write(tmp_path / "01.md", "# One\n## A\nText\n")
    second = _write(tmp_path / "02.md", "# Two\n## B\nText\n")
    out = tmp_path / "out.html"

    result = CliRunner().invoke(main, [str(first), str(second), "-o", str(out), "--front-matter", "1"])

    assert result.exit_code == 0, result.output
    html = out.read_text(encoding="utf-8")
    assert html.index('id="chap_1"') < html.index('id="chap_2"')
    assert 'id="slide_id_1_3"' in html
    assert 'id="slide_id_2_5"' in html


def test_cli_default_code_language(tmp_path: Path) -> None:
    src = _write(tmp_path / "code.md", "# A\n## S\n    print(1)\n")
    out = tmp_path / "out.html"

    result = CliRunner().invoke(main, [str(src), "-o", str(out), "--language", "python"])

    assert result.exit_code == 0, result.output
    assert 'class="language-python"' in out.read_text(encoding="utf-8")


def test_cli_reports_parse_errors(tmp_path: Path) -> None:
    src = _write(tmp_path / "broken.md", "# A\n## S\n   stray\n")
    out = tmp_path / "out.html"

    result = CliRunner().invoke(main, [str(src), "-o", str(out)])

    assert result.exit_code == 1
    assert ":3: unrecognized line" in result.output
    assert not out.exists()


def test_cli_rejects_missing_input(tmp_path: Path) -> None:
    result = CliRunner().invoke(main, [str(tmp_path / "nope.md"), "-o", str(tmp_path / "out.html")])
    assert result.exit_code == 2

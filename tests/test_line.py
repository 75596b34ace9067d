"""Tests for the line classifier.

Covers:
- Chapter/slide titles and the ``--skip--`` marker
- Fenced code start/end, indented source lines
- List items on three levels (ordered/unordered)
- Multiple choice, matching and input questions
- Tables (cells, escaped pipes, alignment)
- Images, include directives, UML fences, line actions
- Footnote and link definitions
- ``classify`` and ``MarkdownLine``
"""

from __future__ import annotations

from markslides.parser import line as ml
from markslides.parser.base import Alignment, LineActionKind
from markslides.parser.line import LineKind, MarkdownLine, classify


# ---------------------------------------------------------------------------
# Outline
# ---------------------------------------------------------------------------

def test_chapter_and_slide_titles() -> None:
    assert ml.chapter_title("# Chapter One") == "Chapter One"
    assert ml.chapter_title("## Slide") is None
    assert ml.slide_title("## Slide A") == "Slide A"
    assert ml.slide_title("### Sub") is None


def test_skipped_slide_title_is_stripped() -> None:
    line = "## Hidden details --skip--"
    assert ml.is_skipped(line)
    assert ml.slide_title(line) == "Hidden details"
    assert not ml.is_skipped("## Visible")


def test_headings_inside_slide() -> None:
    assert ml.heading("### Details") == (3, "Details")
    assert ml.heading("##### Small") == (5, "Small")
    assert ml.heading("###### Too deep") is None


# ---------------------------------------------------------------------------
# Code
# ---------------------------------------------------------------------------

def test_fenced_code_start_with_order_and_caption() -> None:
    fence = ml.fenced_code_start("```java[2]{Listing 1}")
    assert fence == ml.FenceStart("java", 2, "Listing 1")


def test_bare_fence_is_start_and_end() -> None:
    assert ml.fenced_code_start("```") == ml.FenceStart("", 0, None)
    assert ml.is_fenced_code_end("```")
    assert not ml.is_fenced_code_end("```java")


def test_indented_source_excludes_bullets() -> None:
    assert ml.source("    int i;") == "int i;"
    assert ml.source("      indented more") == "  indented more"
    assert ml.source("    * item") is None
    assert ml.source("    - item") is None
    assert ml.source("   three spaces") is None


def test_uml_start_widths() -> None:
    assert ml.uml_start("@startuml[50%][80%]") == ml.UmlStart("50%", "80%")
    assert ml.uml_start("@startuml[40%]") == ml.UmlStart("40%", "40%")
    assert ml.uml_start("@startuml") == ml.UmlStart(None, None)
    assert ml.is_uml_end("@enduml")


def test_code_include_variants() -> None:
    assert ml.code_include('!INCLUDESRC[2] "src/Foo.java" Java') == ml.IncludeMatch("src/Foo.java", 2, "Java")
    assert ml.code_include('!INCLUDESRC "a.py"') == ml.IncludeMatch("a.py", 0, "")
    assert ml.code_include('<!-- include_src: "a.py" -->') == ml.IncludeMatch("a.py", 0, "")
    assert ml.code_include('<!-- include_src[1]: "a.py" Python -->') == ml.IncludeMatch("a.py", 1, "Python")
    assert ml.code_include("include a.py") is None


# ---------------------------------------------------------------------------
# Lists and quizzes
# ---------------------------------------------------------------------------

def test_list_items_on_all_levels() -> None:
    assert ml.list_item("  * Item") == ml.ListMatch(False, 1, "Item", 1)
    assert ml.list_item("    - Sub") == ml.ListMatch(False, 2, "Sub", 1)
    assert ml.list_item("      3. Deep") == ml.ListMatch(True, 3, "Deep", 3)
    assert ml.list_item("  12. Twelve") == ml.ListMatch(True, 1, "Twelve", 12)
    assert ml.list_item("* no indent") is None


def test_multiple_choice() -> None:
    assert ml.multiple_choice("[X] Right") == ml.ChoiceMatch(True, False, "Right")
    assert ml.multiple_choice("[ ]. Wrong") == ml.ChoiceMatch(False, True, "Wrong")
    assert ml.multiple_choice("  * [x] Bullet") == ml.ChoiceMatch(True, False, "Bullet")
    assert ml.multiple_choice("[link] text") is None


def test_matching_and_input_questions() -> None:
    assert ml.matching_question_start('<!-- SHUFFLE type="answer" -->') == "answer"
    assert ml.matching_question("* Java -> Language") == ("Java", "Language")
    assert ml.input_question("<!-- INPUT: 42 | forty-two -->") == ["42", "forty-two"]


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

def test_table_cells_keep_escaped_pipes() -> None:
    assert ml.table_cells("| a | b\\|c |") == [" a ", " b|c "]


def test_header_alignment_from_padding() -> None:
    assert ml.header_alignment("  a  ") is Alignment.CENTER
    assert ml.header_alignment("  a ") is Alignment.RIGHT
    assert ml.header_alignment(" a ") is Alignment.LEFT


def test_separator_alignments() -> None:
    assert ml.is_table_separator("|---|---|")
    assert not ml.is_table_separator("| a | b |")
    assert ml.separator_alignments("|:--|--:|:-:|---|") == [
        Alignment.LEFT,
        Alignment.RIGHT,
        Alignment.CENTER,
        None,
    ]


# ---------------------------------------------------------------------------
# Single-line elements
# ---------------------------------------------------------------------------

def test_image_with_title_and_widths() -> None:
    image = ml.image('![Alt](img/a.png "Title")/50%//30%/')
    assert image == ml.ImageMatch("img/a.png", "Alt", "Title", "50%", "30%")


def test_image_title_defaults_to_alt() -> None:
    image = ml.image("![Alt](a.png)")
    assert image == ml.ImageMatch("a.png", "Alt", "Alt", None, None)


def test_image_width_comment() -> None:
    image = ml.image("![Alt](a.png)<!-- /60%/ -->")
    assert image == ml.ImageMatch("a.png", "Alt", "Alt", "60%", None)


def test_line_actions() -> None:
    assert ml.line_action("((Button))") == (LineActionKind.BUTTON, None)
    assert ml.line_action("((Button-With-Log))") == (LineActionKind.BUTTON_WITH_LOG, None)
    assert ml.line_action("((Live-Preview-Float))") == (LineActionKind.LIVE_PREVIEW_FLOAT, None)
    assert ml.line_action("((Live-CSS .box))") == (LineActionKind.LIVE_CSS, ".box")
    assert ml.line_action("plain text") is None


def test_footnote_and_link_definitions() -> None:
    assert ml.footnote_def("[^1]: Note text") == ("1", "Note text")
    assert ml.link_def('[docs]: https://example.org "Docs"') == ml.LinkDef("docs", "https://example.org", "Docs")
    assert ml.link_def("[docs]: https://example.org") == ml.LinkDef("docs", "https://example.org", None)
    assert ml.link_def("[^1]: Note text") is None


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def test_classify_list_item_is_not_source() -> None:
    kinds = classify("  * Item")
    assert LineKind.UL1 in kinds
    assert LineKind.SOURCE not in kinds


def test_classify_spacing_comment() -> None:
    kinds = classify("<!-- Spacing: 3 -->")
    assert LineKind.SPACE_COMMENT in kinds
    assert LineKind.COMMENT in kinds
    assert ml.space_comment("<!-- Spacing: 3 -->") == 3


def test_classify_zero_spacing_is_still_spacing() -> None:
    assert LineKind.SPACE_COMMENT in classify("<!-- Spacing: 0 -->")


def test_classify_empty_and_normal() -> None:
    assert LineKind.EMPTY in classify("   ")
    assert LineKind.NORMAL in classify("Some text")
    assert LineKind.NORMAL not in classify("  indented")


def test_markdown_line_strips_terminator() -> None:
    line = MarkdownLine("Some text\r\n", 7)
    assert line.string == "Some text"
    assert line.number == 7
    assert LineKind.NORMAL in line

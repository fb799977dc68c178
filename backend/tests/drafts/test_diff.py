from drafts.domain.diff import compare
from drafts.domain.entities import DiffSegmentType
from drafts.domain.text import extract_text_blocks, strip_html_to_preview


def pairs(segments):
    return [(s.type, s.text) for s in segments]


def test_extract_text_blocks_splits_on_block_tags():
    content = "<p>First <b>bold</b></p><div>Second</div>Third<br/>Fourth<br>\n\n<p>  </p>"
    assert extract_text_blocks(content) == ["First bold", "Second", "Third", "Fourth"]


def test_preview_strips_markup_and_truncates():
    content = "<p>Hello</p>\n<p>world</p>" + "<p>" + "x" * 300 + "</p>"
    preview = strip_html_to_preview(content)
    assert preview.startswith("Hello world x")
    assert len(preview) == 160


def test_preview_is_deterministic():
    content = "<h1>Title</h1><p>Body <em>text</em></p>"
    assert strip_html_to_preview(content) == strip_html_to_preview(content) == "Title Body text"


def test_compare_identical_text_is_all_unchanged():
    text = "<p>One</p><p>Two</p><p>Three</p>"
    segments = compare(text, text)
    assert pairs(segments) == [
        (DiffSegmentType.UNCHANGED, "One"),
        (DiffSegmentType.UNCHANGED, "Two"),
        (DiffSegmentType.UNCHANGED, "Three"),
    ]


def test_compare_empty_texts():
    assert compare("", "") == []


def test_compare_changed_line_is_removed_then_added():
    segments = compare("Hello world", "Hello there, world")
    assert pairs(segments) == [
        (DiffSegmentType.REMOVED, "Hello world"),
        (DiffSegmentType.ADDED, "Hello there, world"),
    ]


def test_compare_appended_line():
    segments = compare("<p>Original</p>", "<p>Original</p><p>Added line</p>")
    assert pairs(segments) == [
        (DiffSegmentType.UNCHANGED, "Original"),
        (DiffSegmentType.ADDED, "Added line"),
    ]


def test_compare_removed_tail():
    segments = compare("<p>A</p><p>B</p>", "<p>A</p>")
    assert pairs(segments) == [
        (DiffSegmentType.UNCHANGED, "A"),
        (DiffSegmentType.REMOVED, "B"),
    ]


def test_compare_is_positional():
    # an insertion at the top misaligns every following line
    segments = compare("<p>A</p><p>B</p>", "<p>New</p><p>A</p><p>B</p>")
    assert pairs(segments) == [
        (DiffSegmentType.REMOVED, "A"),
        (DiffSegmentType.ADDED, "New"),
        (DiffSegmentType.REMOVED, "B"),
        (DiffSegmentType.ADDED, "A"),
        (DiffSegmentType.ADDED, "B"),
    ]

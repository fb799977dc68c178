import re

_NEWLINES = re.compile(r"\n+")
_BLOCK_CLOSE = re.compile(r"</(p|div)>", re.IGNORECASE)
_LINE_BREAK = re.compile(r"<br\s*/?>(\s*)", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")

DEFAULT_PREVIEW_LENGTH = 160


def strip_html_to_preview(content: str, length: int = DEFAULT_PREVIEW_LENGTH) -> str:
    """Collapse markup and whitespace into a single-line plain-text excerpt."""
    text = _NEWLINES.sub(" ", content)
    text = _BLOCK_CLOSE.sub(" ", text)
    text = _LINE_BREAK.sub(" ", text)
    text = _TAG.sub(" ", text)
    text = _WHITESPACE.sub(" ", text).strip()
    return text[:length]


def extract_text_blocks(content: str) -> list[str]:
    """Split rich text into non-empty, trimmed plain-text lines.

    Closing ``p``/``div`` tags and ``br`` become line boundaries and every
    other tag is dropped without leaving whitespace behind.
    """
    text = _BLOCK_CLOSE.sub("\n", content)
    text = _LINE_BREAK.sub("\n", text)
    text = _TAG.sub("", text)
    lines = (line.strip() for line in _NEWLINES.split(text))
    return [line for line in lines if line]

"""Split a tag-value document into tag-value pairs.

Blank lines and lines starting with ``#`` are skipped. Every other line is
``<tag>: <value>``, the value being stripped. A value starting with
``<text>`` may span several lines, up to the closing ``</text>`` marker; its
content is kept verbatim.
"""

from __future__ import annotations

from typing import NamedTuple, TYPE_CHECKING

from tvspdx.error import TagValueError

if TYPE_CHECKING:
    from typing import Iterable, Optional

TEXT_START = "<text>"
TEXT_END = "</text>"


class ReaderError(TagValueError):
    """Raised when a line cannot be split into a tag and a value."""

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message, origin=None if line is None else f"line {line}")
        self.line = line


class TagValuePair(NamedTuple):
    """One tag-value pair and the line where its tag appears."""

    tag: str
    value: str
    line: int


def read_tag_values(content: str | Iterable[str]) -> list[TagValuePair]:
    """Read the tag-value pairs of a document.

    :param content: the whole document, or an iterable of lines such as an
        open text file
    :return: the pairs in document order
    :raise ReaderError: if a line has no colon, if a tag is empty, or if a
        ``<text>`` block is not terminated
    """
    if isinstance(content, str):
        lines: Iterable[str] = content.splitlines()
    else:
        lines = content

    result: list[TagValuePair] = []
    # Tag, line number and lines of a <text> block being read
    pending: Optional[tuple[str, int, list[str]]] = None

    for lineno, raw_line in enumerate(lines, start=1):
        line = raw_line.rstrip("\r\n")

        if pending is not None:
            tag, start, text_lines = pending
            end = line.find(TEXT_END)
            if end == -1:
                text_lines.append(line)
                continue
            check_trailer(line[end + len(TEXT_END) :], lineno)
            text_lines.append(line[:end])
            result.append(TagValuePair(tag, "\n".join(text_lines), start))
            pending = None
            continue

        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        tag, sep, value = stripped.partition(":")
        if not sep:
            raise ReaderError(f"no colon found in {stripped!r}", lineno)
        tag = tag.strip()
        if not tag:
            raise ReaderError(f"empty tag in {stripped!r}", lineno)
        value = value.strip()

        if value.startswith(TEXT_START):
            text = value[len(TEXT_START) :]
            end = text.find(TEXT_END)
            if end == -1:
                pending = (tag, lineno, [text])
                continue
            check_trailer(text[end + len(TEXT_END) :], lineno)
            value = text[:end]

        result.append(TagValuePair(tag, value, lineno))

    if pending is not None:
        raise ReaderError(
            f"{TEXT_START} block of tag {pending[0]} is not terminated", pending[1]
        )
    return result


def check_trailer(trailer: str, lineno: int) -> None:
    """Reject anything but blanks after a closing ``</text>`` marker."""
    if trailer.strip():
        raise ReaderError(f"unexpected content after {TEXT_END}: {trailer!r}", lineno)

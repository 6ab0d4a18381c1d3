"""Render a :class:`Document` in the tag-value format.

The output is organized so that parsing it again rebuilds an equal document:
relationships and annotations come right after the creation information,
files described outside of any package come before the packages, and the
files of a package follow the package fields.

Snippets that are not attached to a file are written before the files. Their
relative order with other snippets may differ from the one of the source
document.
"""

from __future__ import annotations

from tvspdx.builders import (
    ANNOTATION,
    CREATION_INFO,
    DOCUMENT,
    FILE,
    ID_TAG,
    OTHER_LICENSE,
    PACKAGE,
    RELATIONSHIP,
    REVIEW,
    SNIPPET,
)
from tvspdx.model import NOASSERTION, NONE_VALUE
from tvspdx.reader import TEXT_END, TEXT_START

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any
    from tvspdx.builders import FieldRule, Section
    from tvspdx.model import Document, File, Snippet


def format_pair(tag: str, value: str, text: bool = False) -> str:
    """Return a tag-value line.

    Free text is delimited by ``<text>...</text>`` and may then span
    several lines.
    """
    if text and value not in (NOASSERTION, NONE_VALUE):
        return f"{tag}: {TEXT_START}{value}{TEXT_END}"
    return f"{tag}: {value}"


def trailer_lines(tag: str, item: Any) -> list[str]:
    """Return the lines completing the sub-record written with *tag*."""
    output = []
    if tag == "ExternalRef" and item.comment is not None:
        output.append(format_pair("ExternalRefComment", item.comment, text=True))
    elif tag == "ArtifactOfProjectName":
        if item.home_page is not None:
            output.append(format_pair("ArtifactOfProjectHomePage", item.home_page))
        if item.uri is not None:
            output.append(format_pair("ArtifactOfProjectURI", item.uri))
    return output


def field_lines(section: Section, entity: Any) -> list[str]:
    """Render the fields of *entity* in table order."""
    output: list[str] = []
    rule: FieldRule
    for tag, rule in section.fields.items():
        if rule.presence_attr is not None and not getattr(entity, rule.presence_attr):
            continue
        value = getattr(entity, rule.attr)
        if rule.multi:
            for item in value:
                output.append(format_pair(tag, rule.render(item), rule.text))
                output += trailer_lines(tag, item)
        elif value is not None:
            output.append(format_pair(tag, rule.render(value), rule.text))
    return output


def entity_lines(section: Section, entity: Any, with_id: bool = False) -> list[str]:
    """Render an entity opened by a section header."""
    assert section.header is not None and section.render_header is not None
    output = [format_pair(section.header, section.render_header(entity))]
    if with_id and entity.spdx_id is not None:
        output.append(format_pair(ID_TAG, str(entity.spdx_id)))
    return output + field_lines(section, entity)


def write_tagvalue(document: Document) -> list[str]:
    """Generate the list of tag-value lines describing *document*.

    Lines holding free text may contain newlines. Join the result with
    ``"\\n"`` to get the document content.
    """
    output: list[str] = []
    is_first_section = True

    def add_section(section: str) -> None:
        nonlocal is_first_section
        nonlocal output
        if not is_first_section:
            output += [""]
        is_first_section = False
        output += [f"# {section}", ""]

    add_section("Document Information")
    output += field_lines(DOCUMENT, document)

    if document.creation_info is not None:
        add_section("Creation Info")
        output += field_lines(CREATION_INFO, document.creation_info)

    if document.relationships:
        add_section("Relationships")
        for rel in document.relationships:
            output += entity_lines(RELATIONSHIP, rel)

    if document.annotations:
        add_section("Annotations")
        for ann in document.annotations:
            output += entity_lines(ANNOTATION, ann)

    attached = {sid for f in document.files for sid in f.snippet_ids}
    snippets: dict[Any, Snippet] = {
        snippet.spdx_id: snippet for snippet in document.snippets
    }

    def file_lines(f: File) -> list[str]:
        result = entity_lines(FILE, f, with_id=True)
        for sid in f.snippet_ids:
            result += ["", "# Snippet", ""]
            result += entity_lines(SNIPPET, snippets[sid])
        return result

    for snippet in document.snippets:
        if snippet.spdx_id not in attached:
            add_section("Snippet")
            output += entity_lines(SNIPPET, snippet)

    for f in document.unpackaged_files():
        add_section("File")
        output += file_lines(f)

    for pkg in document.packages:
        add_section("Package")
        output += entity_lines(PACKAGE, pkg, with_id=True)
        for f in document.package_files(pkg):
            output += ["", "# File", ""]
            output += file_lines(f)

    for lic in document.other_licenses:
        add_section("Other License")
        output += entity_lines(OTHER_LICENSE, lic)

    for review in document.reviews:
        add_section("Review")
        output += entity_lines(REVIEW, review)

    return output

"""Build an SPDX document out of tag-value pairs.

The tag-value format has no section closing markers: a section ends when
the header tag of the next one appears. :class:`TagValueParser` is a state
machine whose state is the section currently open. Each incoming pair is
either owned by the current section, or is the header of a section allowed
to follow it, in which case the entities that header closes are committed
to the document and a new entity is opened.

A typical use is::

    from tvspdx.reader import read_tag_values
    from tvspdx.parser import parse_tag_values

    with open("glibc.spdx") as f:
        doc = parse_tag_values(read_tag_values(f))

Parsing stops on the first error, no partial document is returned.
"""

from __future__ import annotations

from enum import Enum

import tvspdx.log
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
    DuplicateValue,
    build,
)
from tvspdx.error import TagValueError
from tvspdx.extract import ExtractionError, extract_element_id
from tvspdx.model import Document

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any, Iterable, Optional, Sequence, Tuple, Union

    from tvspdx.builders import Section
    from tvspdx.model import (
        Annotation,
        CreationInfo,
        ElementID,
        ExternalRef,
        ArtifactOfProject,
        File,
        OtherLicense,
        Package,
        Relationship,
        Review,
        Snippet,
    )
    from tvspdx.reader import TagValuePair

    PAIR = Union[Tuple[str, str], TagValuePair]


class ParserState(Enum):
    """Section of the document the parser is in."""

    START = "Start"
    CREATION_INFO = "CreationInfo"
    PACKAGE = "Package"
    FILE = "File"
    SNIPPET = "Snippet"
    OTHER_LICENSE = "OtherLicense"
    REVIEW = "Review"
    DONE = "Done"


# Section header tags and the state they open
HEADER_STATES: dict[str, ParserState] = {
    PACKAGE.header: ParserState.PACKAGE,
    FILE.header: ParserState.FILE,
    SNIPPET.header: ParserState.SNIPPET,
    OTHER_LICENSE.header: ParserState.OTHER_LICENSE,
    REVIEW.header: ParserState.REVIEW,
}

# Section headers accepted in each state. Other license and review sections
# trail the document: once one of them is open, packages, files and snippets
# can no longer be described.
ALLOWED_HEADERS: dict[ParserState, frozenset[str]] = {
    ParserState.CREATION_INFO: frozenset(HEADER_STATES),
    ParserState.PACKAGE: frozenset(HEADER_STATES),
    ParserState.FILE: frozenset(HEADER_STATES),
    ParserState.SNIPPET: frozenset(HEADER_STATES),
    ParserState.OTHER_LICENSE: frozenset((OTHER_LICENSE.header, REVIEW.header)),
    ParserState.REVIEW: frozenset((REVIEW.header,)),
}

# Open entities committed when a section header is seen, innermost first
CLOSES: dict[ParserState, Sequence[ParserState]] = {
    ParserState.PACKAGE: (ParserState.SNIPPET, ParserState.FILE, ParserState.PACKAGE),
    ParserState.FILE: (ParserState.SNIPPET, ParserState.FILE),
    ParserState.SNIPPET: (ParserState.SNIPPET,),
    ParserState.OTHER_LICENSE: (
        ParserState.SNIPPET,
        ParserState.FILE,
        ParserState.PACKAGE,
        ParserState.OTHER_LICENSE,
    ),
    ParserState.REVIEW: (
        ParserState.SNIPPET,
        ParserState.FILE,
        ParserState.PACKAGE,
        ParserState.OTHER_LICENSE,
        ParserState.REVIEW,
    ),
}

# Section opened by a header, and the parser attribute holding its entity
OPENED: dict[ParserState, Tuple[Section, str]] = {
    ParserState.PACKAGE: (PACKAGE, "package"),
    ParserState.FILE: (FILE, "file"),
    ParserState.SNIPPET: (SNIPPET, "snippet"),
    ParserState.OTHER_LICENSE: (OTHER_LICENSE, "other_license"),
    ParserState.REVIEW: (REVIEW, "review"),
}

ARTIFACT_OF_PROJECT_TAGS = ("ArtifactOfProjectHomePage", "ArtifactOfProjectURI")


class ParseError(TagValueError):
    """Raised when the tag-value pairs do not describe a valid document.

    :ivar state: the parser state when the error occurred
    :ivar tag: the tag of the offending pair, if any
    :ivar value: the value of the offending pair, if any
    :ivar line: line of the offending pair in the source document, if known
    """

    def __init__(
        self,
        message: str,
        state: Optional[ParserState] = None,
        tag: Optional[str] = None,
        value: Optional[str] = None,
    ):
        super().__init__(message)
        self.state = state
        self.tag = tag
        self.value = value
        self.line: Optional[int] = None

    def __str__(self) -> str:
        context = []
        if self.line is not None:
            context.append(f"line {self.line}")
        if self.state is not None:
            context.append(f"state {self.state.value}")
        if self.tag is not None:
            context.append(f"tag {self.tag!r}")
        if self.value is not None:
            context.append(f"value {self.value!r}")
        if not context:
            return self.reason
        return f"{self.reason} ({', '.join(context)})"


class MalformedValueError(ParseError):
    """A compound value does not follow its grammar."""

    pass


class UnknownTagError(ParseError):
    """A tag is neither owned by the current section nor a valid header."""

    pass


class StructuralError(ParseError):
    """Sections or identifiers are not arranged as the format requires."""

    pass


class DuplicateTagError(StructuralError):
    """A single-valued tag is repeated while parsing in strict mode."""

    pass


class InvariantError(ParseError):
    """The parsed document violates a requirement checked at finalization."""

    pass


class MissingElementIDError(InvariantError):
    """A package, file or snippet has no SPDX identifier."""

    pass


class TagValueParser:
    """State machine turning tag-value pairs into a :class:`Document`.

    Feed the pairs in document order with :meth:`consume`, then call
    :meth:`finalize` to get the document. An instance parses one document
    and must not be shared between threads.
    """

    def __init__(self, strict: bool = False) -> None:
        """Initialize a parser.

        :param strict: raise :class:`DuplicateTagError` when a single-valued
            tag is repeated in a section instead of keeping the last value
        """
        self.strict = strict
        self.state = ParserState.START

        self.doc: Optional[Document] = None
        self.creation_info: Optional[CreationInfo] = None
        self.package: Optional[Package] = None
        self.file: Optional[File] = None
        self.snippet: Optional[Snippet] = None
        self.other_license: Optional[OtherLicense] = None
        self.review: Optional[Review] = None
        self.relationship: Optional[Relationship] = None
        self.annotation: Optional[Annotation] = None

        # Sub-records completed by the tags immediately following them
        self.external_ref: Optional[ExternalRef] = None
        self.artifact: Optional[ArtifactOfProject] = None

        self.element_ids: set[ElementID] = set()
        # Tags already applied to each open entity, by section kind
        self.seen: dict[str, set[str]] = {DOCUMENT.kind: set()}

    def consume(self, tag: str, value: str) -> None:
        """Process one tag-value pair.

        :param tag: the tag
        :param value: the value, stripped by the reader
        :raise ParseError: if the pair cannot be processed in the current
            state. The parser must not be used after that.
        """
        if self.state is ParserState.DONE:
            raise StructuralError(
                "cannot parse pairs after the document has been finalized",
                self.state,
                tag,
                value,
            )
        if self.doc is None:
            self.doc = Document()

        try:
            self.parse_pair(tag, value)
        except ExtractionError as err:
            raise MalformedValueError(err.reason, self.state, tag, value) from err
        except DuplicateValue as err:
            raise DuplicateTagError(
                f"{tag} may appear only once per {err.kind} section",
                self.state,
                tag,
                value,
            ) from None

    def parse_pair(self, tag: str, value: str) -> None:
        """Route a pair to the routine of the current state."""
        if self.state is ParserState.START:
            self.parse_pair_from_start(tag, value)
        elif self.state is ParserState.CREATION_INFO:
            self.parse_section_pair(CREATION_INFO, self.creation_info, tag, value)
        elif self.state is ParserState.PACKAGE:
            self.parse_pair_from_package(tag, value)
        elif self.state is ParserState.FILE:
            self.parse_pair_from_file(tag, value)
        elif self.state is ParserState.SNIPPET:
            self.parse_section_pair(SNIPPET, self.snippet, tag, value)
        elif self.state is ParserState.OTHER_LICENSE:
            self.parse_section_pair(OTHER_LICENSE, self.other_license, tag, value)
        elif self.state is ParserState.REVIEW:
            self.parse_section_pair(REVIEW, self.review, tag, value)
        else:
            raise StructuralError(
                f"parser state {self.state.value} not recognized", self.state, tag, value
            )

    def parse_pair_from_start(self, tag: str, value: str) -> None:
        assert self.doc is not None
        if tag == ID_TAG:
            element_id = extract_element_id(value)
            if self.doc.spdx_id is not None:
                if self.strict:
                    raise DuplicateValue(DOCUMENT.kind)
                # Last value wins, the replaced identifier is released
                self.element_ids.discard(self.doc.spdx_id)
            self.claim_element_id(element_id, tag, value)
            self.doc.spdx_id = element_id
        elif not build(DOCUMENT, self.doc, tag, value, self.seen[DOCUMENT.kind], self.strict):
            # Anything else starts the creation information section
            self.enter_creation_info()
            self.parse_pair(tag, value)

    def parse_pair_from_package(self, tag: str, value: str) -> None:
        assert self.package is not None
        pending, self.external_ref = self.external_ref, None
        if tag == "ExternalRefComment":
            if pending is None:
                raise StructuralError(
                    "ExternalRefComment does not follow an ExternalRef",
                    self.state,
                    tag,
                    value,
                )
            pending.comment = value
        elif tag == ID_TAG:
            self.set_element_id(self.package, tag, value)
        else:
            self.parse_section_pair(PACKAGE, self.package, tag, value)
            if tag == "ExternalRef" and self.package is not None:
                self.external_ref = self.package.external_refs[-1]

    def parse_pair_from_file(self, tag: str, value: str) -> None:
        assert self.file is not None
        pending = self.artifact
        if tag not in ARTIFACT_OF_PROJECT_TAGS:
            self.artifact = None

        if tag in ARTIFACT_OF_PROJECT_TAGS:
            if pending is None:
                raise StructuralError(
                    f"{tag} does not follow an ArtifactOfProjectName",
                    self.state,
                    tag,
                    value,
                )
            if tag == "ArtifactOfProjectHomePage":
                pending.home_page = value
            else:
                pending.uri = value
        elif tag == ID_TAG:
            self.set_element_id(self.file, tag, value)
        else:
            self.parse_section_pair(FILE, self.file, tag, value)
            if tag == "ArtifactOfProjectName" and self.file is not None:
                self.artifact = self.file.artifact_of_projects[-1]

    def parse_section_pair(
        self, section: Section, entity: Any, tag: str, value: str
    ) -> None:
        """Handle a pair in any state but START.

        The tag is looked up, in order, in the section headers, in the
        tags owned by *section*, and in the relationship and annotation
        tags which may appear anywhere after the document information.
        """
        if tag in HEADER_STATES:
            self.open_section(HEADER_STATES[tag], tag, value)
        elif build(section, entity, tag, value, self.seen[section.kind], self.strict):
            return
        elif not self.parse_relationship_or_annotation(tag, value):
            raise UnknownTagError(
                f"received unknown tag {tag} in {section.kind} section",
                self.state,
                tag,
                value,
            )

    def parse_relationship_or_annotation(self, tag: str, value: str) -> bool:
        """Handle relationship and annotation tags, without changing state.

        :return: False if *tag* is neither a relationship nor an annotation tag
        """
        if tag == RELATIONSHIP.header:
            self.commit_relationship()
            self.relationship = RELATIONSHIP.open(value)
            self.seen[RELATIONSHIP.kind] = set()
        elif tag in RELATIONSHIP.fields:
            if self.relationship is None:
                raise StructuralError(
                    f"{tag} does not follow a Relationship", self.state, tag, value
                )
            build(
                RELATIONSHIP,
                self.relationship,
                tag,
                value,
                self.seen[RELATIONSHIP.kind],
                self.strict,
            )
        elif tag == ANNOTATION.header:
            self.commit_annotation()
            self.annotation = ANNOTATION.open(value)
            self.seen[ANNOTATION.kind] = set()
        elif tag in ANNOTATION.fields:
            if self.annotation is None:
                raise StructuralError(
                    f"{tag} does not follow an Annotator", self.state, tag, value
                )
            build(
                ANNOTATION,
                self.annotation,
                tag,
                value,
                self.seen[ANNOTATION.kind],
                self.strict,
            )
        else:
            return False
        return True

    def enter_creation_info(self) -> None:
        tvspdx.log.debug("entering CreationInfo section", state=self.state.value)
        self.state = ParserState.CREATION_INFO
        self.creation_info = CREATION_INFO.open("")
        self.seen[CREATION_INFO.kind] = set()

    def open_section(self, target: ParserState, tag: str, value: str) -> None:
        """Commit the entities closed by a section header and open a new one.

        :param target: the state the header opens
        :param tag: the header tag
        :param value: the header value
        """
        if tag not in ALLOWED_HEADERS[self.state]:
            raise UnknownTagError(
                f"{tag} cannot appear after the {self.state.value} section",
                self.state,
                tag,
                value,
            )

        # Closed packages and files, and the package or file a new entity
        # belongs to, must have received their identifier by now.
        closed = CLOSES[target]
        for kind, entity in (
            (ParserState.FILE, self.file),
            (ParserState.PACKAGE, self.package),
        ):
            if entity is None or entity.spdx_id is not None:
                continue
            if (
                kind in closed
                or (kind is ParserState.FILE and target is ParserState.SNIPPET)
                or (kind is ParserState.PACKAGE and target is ParserState.FILE)
            ):
                raise StructuralError(
                    f"{kind.value.lower()} with {kind.value}Name {entity.name}"
                    " does not have SPDX identifier",
                    self.state,
                    tag,
                    value,
                )

        # A malformed header value is reported in the state it arrived in
        section, attr = OPENED[target]
        opened = section.open(value)
        if target is ParserState.SNIPPET:
            assert opened.spdx_id is not None
            self.claim_element_id(opened.spdx_id, tag, value)
            if self.file is not None:
                opened.from_file_id = self.file.spdx_id

        self.commit_creation_info()
        for kind in closed:
            self.commit(kind)

        tvspdx.log.debug(
            f"{self.state.value} -> {target.value} on {tag}: {value}",
            state=self.state.value,
        )
        self.state = target
        setattr(self, attr, opened)
        self.seen[section.kind] = set()

    def set_element_id(self, entity: Package | File, tag: str, value: str) -> None:
        """Store the identifier of the open package or file.

        :raise StructuralError: if the entity already has an identifier, or
            if the identifier is used by another element
        """
        if entity.spdx_id is not None:
            raise StructuralError(
                f"{self.state.value.lower()} {entity.name} already has SPDX"
                f" identifier {entity.spdx_id}",
                self.state,
                tag,
                value,
            )
        element_id = extract_element_id(value)
        self.claim_element_id(element_id, tag, value)
        entity.spdx_id = element_id

    def claim_element_id(self, element_id: ElementID, tag: str, value: str) -> None:
        if element_id in self.element_ids:
            raise StructuralError(
                f"duplicate SPDX identifier {element_id}", self.state, tag, value
            )
        self.element_ids.add(element_id)

    def commit(self, kind: ParserState) -> None:
        """Move the open entity of the given kind into the document."""
        assert self.doc is not None
        if kind is ParserState.SNIPPET:
            snippet, self.snippet = self.snippet, None
            if snippet is not None:
                if self.file is not None and snippet.spdx_id is not None:
                    self.file.snippet_ids.append(snippet.spdx_id)
                self.doc.snippets.append(snippet)
        elif kind is ParserState.FILE:
            f, self.file = self.file, None
            self.artifact = None
            if f is not None:
                if self.package is not None and f.spdx_id is not None:
                    self.package.file_ids.append(f.spdx_id)
                self.doc.files.append(f)
        elif kind is ParserState.PACKAGE:
            pkg, self.package = self.package, None
            self.external_ref = None
            if pkg is not None:
                self.doc.packages.append(pkg)
        elif kind is ParserState.OTHER_LICENSE:
            lic, self.other_license = self.other_license, None
            if lic is not None:
                self.doc.other_licenses.append(lic)
        elif kind is ParserState.REVIEW:
            review, self.review = self.review, None
            if review is not None:
                self.doc.reviews.append(review)

    def commit_creation_info(self) -> None:
        assert self.doc is not None
        if self.creation_info is not None:
            self.doc.creation_info = self.creation_info
            self.creation_info = None

    def commit_relationship(self) -> None:
        assert self.doc is not None
        if self.relationship is not None:
            self.doc.relationships.append(self.relationship)
            self.relationship = None

    def commit_annotation(self) -> None:
        assert self.doc is not None
        if self.annotation is not None:
            self.doc.annotations.append(self.annotation)
            self.annotation = None

    def finalize(self) -> Document:
        """Commit the open entities and check the document.

        :return: the parsed document
        :raise MissingElementIDError: if a package, file or snippet has no
            SPDX identifier
        :raise InvariantError: if no pair has been consumed
        """
        state = self.state
        if state is ParserState.DONE:
            raise StructuralError("document already finalized", state)
        if self.doc is None:
            raise InvariantError("no tag-value pairs to parse", state)

        self.commit_creation_info()
        for kind in CLOSES[ParserState.REVIEW]:
            self.commit(kind)
        self.commit_relationship()
        self.commit_annotation()
        self.state = ParserState.DONE

        doc = self.doc
        for pkg in doc.packages:
            if pkg.spdx_id is None:
                raise MissingElementIDError(
                    f"package with PackageName {pkg.name} does not have SPDX"
                    " identifier",
                    state,
                )
        for f in doc.files:
            if f.spdx_id is None:
                raise MissingElementIDError(
                    f"file with FileName {f.name} does not have SPDX identifier",
                    state,
                )
        for snippet in doc.snippets:
            if snippet.spdx_id is None:
                raise MissingElementIDError(
                    f"snippet {snippet.name} does not have SPDX identifier", state
                )

        tvspdx.log.debug(
            f"parsed document {doc.name}: {len(doc.packages)} package(s),"
            f" {len(doc.files)} file(s), {len(doc.snippets)} snippet(s)",
            state=state.value,
        )
        return doc


def parse_tag_values(pairs: Iterable[PAIR], strict: bool = False) -> Document:
    """Parse a sequence of tag-value pairs into a :class:`Document`.

    :param pairs: ``(tag, value)`` tuples or
        :class:`tvspdx.reader.TagValuePair` records, in document order
    :param strict: see :class:`TagValueParser`
    :raise ParseError: on the first invalid pair, or if the document is
        incomplete
    """
    parser = TagValueParser(strict=strict)
    for pair in pairs:
        try:
            parser.consume(pair[0], pair[1])
        except ParseError as err:
            err.line = getattr(pair, "line", None)
            raise
    return parser.finalize()

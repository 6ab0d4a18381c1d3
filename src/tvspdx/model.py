"""In-memory model of an SPDX 2.3 document read from the tag-value format.

This is following the specification from https://spdx.github.io/spdx-spec/v2.3/

Every entity is owned by the :class:`Document`. Entities never hold a
reference to each other: packages list the :class:`ElementID` of their files,
files the :class:`ElementID` of their snippets, and relationships and
annotations point to elements through :class:`DocElementID` values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from dateutil import parser as date_parser

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime
    from typing import Literal, Optional, Union

NOASSERTION: Literal["NOASSERTION"] = "NOASSERTION"
"""Indicates that the preparer of the SPDX document is not making any assertion
regarding the value of this field.
"""
NONE_VALUE: Literal["NONE"] = "NONE"
"""When this value is used as the object of a property it indicates that the
preparer of the SpdxDocument believes that there is no value for the property.
This value should only be used if there is sufficient evidence to support this
assertion."""

SPDXREF_PREFIX = "SPDXRef-"
DOCUMENTREF_PREFIX = "DocumentRef-"


class ElementID:
    """Identify an element (document, package, file, snippet) of a document.

    See 6.3 `SPDX identifier field
    <https://spdx.github.io/spdx-spec/v2.3/document-creation-information/#63-spdx-identifier-field>`_.

    The identifier is stored without its ``SPDXRef-`` prefix and rendered
    with it. Two identifiers are equal when their rendered strings are
    equal, and an :class:`ElementID` compares equal to its rendered string:

    >>> from tvspdx.model import ElementID
    >>> ElementID("Package-glibc") == "SPDXRef-Package-glibc"
    True
    """

    def __init__(self, value: str) -> None:
        if value.startswith(SPDXREF_PREFIX):
            value = value[len(SPDXREF_PREFIX) :]
        self.value = value

    def __str__(self) -> str:
        return f"{SPDXREF_PREFIX}{self.value}"

    def __repr__(self) -> str:
        return f"ElementID({str(self)!r})"

    def __eq__(self, o: object) -> bool:
        if isinstance(o, ElementID):
            return o.value == self.value
        if isinstance(o, str):
            return o == str(self)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))


@dataclass(frozen=True)
class DocElementID:
    """Reference an element, possibly in another document.

    Exactly one of *element_id* and *special* is set. *document_ref_id*
    holds the full ``DocumentRef-...`` token when the element lives in an
    external document.
    """

    element_id: Optional[ElementID] = None
    document_ref_id: Optional[str] = None
    special: Optional[str] = None

    def __str__(self) -> str:
        if self.special is not None:
            return self.special
        if self.document_ref_id is not None:
            return f"{self.document_ref_id}:{self.element_id}"
        return str(self.element_id)


class ChecksumAlgorithm(Enum):
    """Algorithms accepted in checksum fields."""

    SHA1 = "SHA1"
    SHA224 = "SHA224"
    SHA256 = "SHA256"
    SHA384 = "SHA384"
    SHA512 = "SHA512"
    SHA3_256 = "SHA3-256"
    SHA3_384 = "SHA3-384"
    SHA3_512 = "SHA3-512"
    BLAKE2B_256 = "BLAKE2b-256"
    BLAKE2B_384 = "BLAKE2b-384"
    BLAKE2B_512 = "BLAKE2b-512"
    BLAKE3 = "BLAKE3"
    MD2 = "MD2"
    MD4 = "MD4"
    MD5 = "MD5"
    MD6 = "MD6"
    ADLER32 = "ADLER32"


@dataclass(frozen=True)
class Checksum:
    """An algorithm and the hexadecimal digest it produced."""

    algorithm: ChecksumAlgorithm
    value: str

    def __str__(self) -> str:
        return f"{self.algorithm.value}: {self.value}"


class ActorType(Enum):
    """Kind of entity behind a creator, supplier, reviewer or annotator."""

    PERSON = "Person"
    ORGANIZATION = "Organization"
    TOOL = "Tool"


@dataclass(frozen=True)
class Actor:
    """Represent an Entity (Organization, Person, Tool)."""

    actor_type: ActorType
    name: str

    def __str__(self) -> str:
        return f"{self.actor_type.value}: {self.name}"


if TYPE_CHECKING:
    MAYBE_ACTOR = Union[Actor, Literal["NOASSERTION"]]


@dataclass(frozen=True)
class ExternalDocumentRef:
    """Reference another SPDX document.

    See 6.6 `External document references field
    <https://spdx.github.io/spdx-spec/v2.3/document-creation-information/#66-external-document-references-field>`_.
    """

    document_ref_id: str
    uri: str
    checksum: Checksum

    def __str__(self) -> str:
        return f"{self.document_ref_id} {self.uri} {self.checksum}"


@dataclass
class CreationInfo:
    """Document where and by whom the SPDX document has been created."""

    creators: list[Actor] = field(default_factory=list)
    created: Optional[str] = None
    creator_comment: Optional[str] = None
    license_list_version: Optional[str] = None

    @property
    def created_datetime(self) -> Optional[datetime]:
        """Return the creation timestamp as a timezone aware datetime."""
        if self.created is None:
            return None
        return date_parser.isoparse(self.created)


@dataclass(frozen=True)
class PackageVerificationCode:
    """Verification code of the files contained in a package.

    See 7.9 `Package verification code field
    <https://spdx.github.io/spdx-spec/v2.3/package-information/#79-package-verification-code-field>`_.
    """

    value: str
    excluded_files: tuple[str, ...] = ()

    def __str__(self) -> str:
        if not self.excluded_files:
            return self.value
        return f"{self.value} (excludes: {', '.join(self.excluded_files)})"


class ExternalRefCategory(Enum):
    """Identify the category of an ExternalRef."""

    security = "SECURITY"
    package_manager = "PACKAGE-MANAGER"
    persistent_id = "PERSISTENT-ID"
    other = "OTHER"


@dataclass
class ExternalRef:
    """Reference an external source of information relevant to the package.

    See 7.21 `External reference field
    <https://spdx.github.io/spdx-spec/v2.3/package-information/#721-external-reference-field>`_
    """

    reference_category: ExternalRefCategory
    reference_type: str
    reference_locator: str
    comment: Optional[str] = None

    def __str__(self) -> str:
        return " ".join(
            (self.reference_category.value, self.reference_type, self.reference_locator)
        )


class PrimaryPackagePurpose(Enum):
    """Provides information about the primary purpose of the identified package.

    See 7.24 `Primary Package Purpose field
    <https://spdx.github.io/spdx-spec/v2.3/package-information/#724-primary-package-purpose-field>`_
    """  # noqa: B950

    APPLICATION = auto()
    FRAMEWORK = auto()
    LIBRARY = auto()
    CONTAINER = auto()
    OPERATING_SYSTEM = auto()
    DEVICE = auto()
    FIRMWARE = auto()
    SOURCE = auto()
    ARCHIVE = auto()
    FILE = auto()
    INSTALL = auto()
    OTHER = auto()

    def __str__(self) -> str:
        # The tag-value format spells multi-word purposes with a dash
        return self.name.replace("_", "-")


@dataclass
class Package:
    """Describe a package.

    See `7 Package information section
    <https://spdx.github.io/spdx-spec/v2.3/package-information/>`_

    A package is opened by a ``PackageName`` tag. Until its ``SPDXID`` tag
    is seen, :attr:`spdx_id` is :const:`None`.

    :ivar list[ElementID] file_ids: identifiers of the files described in
        the package section, in order of appearance.
    """

    name: str = ""
    spdx_id: Optional[ElementID] = None
    version: Optional[str] = None
    file_name: Optional[str] = None
    supplier: Optional[MAYBE_ACTOR] = None
    originator: Optional[MAYBE_ACTOR] = None
    download_location: Optional[str] = None
    files_analyzed: bool = True
    files_analyzed_tag_present: bool = False
    verification_code: Optional[PackageVerificationCode] = None
    checksums: list[Checksum] = field(default_factory=list)
    home_page: Optional[str] = None
    source_info: Optional[str] = None
    license_concluded: Optional[str] = None
    license_info_from_files: list[str] = field(default_factory=list)
    license_declared: Optional[str] = None
    license_comments: Optional[str] = None
    copyright_text: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    comment: Optional[str] = None
    external_refs: list[ExternalRef] = field(default_factory=list)
    attribution_texts: list[str] = field(default_factory=list)
    primary_purpose: Optional[PrimaryPackagePurpose] = None
    release_date: Optional[str] = None
    built_date: Optional[str] = None
    valid_until_date: Optional[str] = None
    file_ids: list[ElementID] = field(default_factory=list)


@dataclass
class ArtifactOfProject:
    """Project a file is an artifact of (deprecated since SPDX 2.1)."""

    name: str
    home_page: Optional[str] = None
    uri: Optional[str] = None


@dataclass
class File:
    """Describe a file.

    See `8 File information section
    <https://spdx.github.io/spdx-spec/v2.3/file-information/>`_
    """

    name: str = ""
    spdx_id: Optional[ElementID] = None
    file_types: list[str] = field(default_factory=list)
    checksums: list[Checksum] = field(default_factory=list)
    license_concluded: Optional[str] = None
    license_info_in_files: list[str] = field(default_factory=list)
    license_comments: Optional[str] = None
    copyright_text: Optional[str] = None
    artifact_of_projects: list[ArtifactOfProject] = field(default_factory=list)
    comment: Optional[str] = None
    notice: Optional[str] = None
    contributors: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    attribution_texts: list[str] = field(default_factory=list)
    snippet_ids: list[ElementID] = field(default_factory=list)


@dataclass(frozen=True)
class SnippetRange:
    """Inclusive range of bytes or lines of a file."""

    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.start}:{self.end}"


@dataclass
class Snippet:
    """Describe a part of a file.

    See `9 Snippet information section
    <https://spdx.github.io/spdx-spec/v2.3/snippet-information/>`_
    """

    spdx_id: Optional[ElementID] = None
    from_file_id: Optional[ElementID] = None
    byte_ranges: list[SnippetRange] = field(default_factory=list)
    line_ranges: list[SnippetRange] = field(default_factory=list)
    license_concluded: Optional[str] = None
    license_info_in_snippets: list[str] = field(default_factory=list)
    license_comments: Optional[str] = None
    copyright_text: Optional[str] = None
    comment: Optional[str] = None
    name: Optional[str] = None
    attribution_texts: list[str] = field(default_factory=list)


@dataclass
class OtherLicense:
    """A license not on the SPDX License List.

    See `10 Other licensing information detected section
    <https://spdx.github.io/spdx-spec/v2.3/other-licensing-information-detected/>`_
    """

    license_id: str = ""
    extracted_text: Optional[str] = None
    name: Optional[str] = None
    cross_references: list[str] = field(default_factory=list)
    comment: Optional[str] = None


@dataclass
class Review:
    """Review of the document (deprecated since SPDX 2.0)."""

    reviewer: Optional[Actor] = None
    date: Optional[str] = None
    comment: Optional[str] = None


class RelationshipType(Enum):
    """Describes the type of relationship between two SPDX elements."""

    DESCRIBES = auto()
    DESCRIBED_BY = auto()
    CONTAINS = auto()
    CONTAINED_BY = auto()
    DEPENDS_ON = auto()
    DEPENDENCY_OF = auto()
    DEPENDENCY_MANIFEST_OF = auto()
    BUILD_DEPENDENCY_OF = auto()
    DEV_DEPENDENCY_OF = auto()
    OPTIONAL_DEPENDENCY_OF = auto()
    PROVIDED_DEPENDENCY_OF = auto()
    TEST_DEPENDENCY_OF = auto()
    RUNTIME_DEPENDENCY_OF = auto()
    EXAMPLE_OF = auto()
    GENERATES = auto()
    GENERATED_FROM = auto()
    ANCESTOR_OF = auto()
    DESCENDANT_OF = auto()
    VARIANT_OF = auto()
    DISTRIBUTION_ARTIFACT = auto()
    PATCH_FOR = auto()
    PATCH_APPLIED = auto()
    COPY_OF = auto()
    FILE_ADDED = auto()
    FILE_DELETED = auto()
    FILE_MODIFIED = auto()
    EXPANDED_FROM_ARCHIVE = auto()
    DYNAMIC_LINK = auto()
    STATIC_LINK = auto()
    DATA_FILE_OF = auto()
    TEST_CASE_OF = auto()
    BUILD_TOOL_OF = auto()
    DEV_TOOL_OF = auto()
    TEST_OF = auto()
    TEST_TOOL_OF = auto()
    DOCUMENTATION_OF = auto()
    OPTIONAL_COMPONENT_OF = auto()
    METAFILE_OF = auto()
    PACKAGE_OF = auto()
    AMENDS = auto()
    PREREQUISITE_FOR = auto()
    HAS_PREREQUISITE = auto()
    REQUIREMENT_DESCRIPTION_FOR = auto()
    SPECIFICATION_FOR = auto()
    OTHER = auto()


@dataclass
class Relationship:
    """Provides information about the relationship between two SPDX elements.

    See 11.1 `Relationship field
    <https://spdx.github.io/spdx-spec/v2.3/relationships-between-SPDX-elements/#111-relationship-field>`_.
    """

    element_id: DocElementID
    relationship_type: RelationshipType
    related_element_id: DocElementID
    comment: Optional[str] = None

    def __str__(self) -> str:
        return (
            f"{self.element_id} {self.relationship_type.name}"
            f" {self.related_element_id}"
        )


class AnnotationType(Enum):
    REVIEW = "REVIEW"
    OTHER = "OTHER"


@dataclass
class Annotation:
    """Comment on an element.

    See `12 Annotations section
    <https://spdx.github.io/spdx-spec/v2.3/annotations/>`_
    """

    annotator: Optional[Actor] = None
    date: Optional[str] = None
    annotation_type: Optional[AnnotationType] = None
    spdx_ref: Optional[DocElementID] = None
    comment: Optional[str] = None


@dataclass
class Document:
    """Describe the SPDX Document.

    The document exclusively owns every entity parsed from the tag-value
    stream. Lists preserve the order in which entities were committed.
    """

    spdx_version: Optional[str] = None
    data_license: Optional[str] = None
    spdx_id: Optional[ElementID] = None
    name: Optional[str] = None
    namespace: Optional[str] = None
    comment: Optional[str] = None
    external_document_refs: list[ExternalDocumentRef] = field(default_factory=list)
    creation_info: Optional[CreationInfo] = None
    packages: list[Package] = field(default_factory=list)
    files: list[File] = field(default_factory=list)
    snippets: list[Snippet] = field(default_factory=list)
    other_licenses: list[OtherLicense] = field(default_factory=list)
    reviews: list[Review] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)
    annotations: list[Annotation] = field(default_factory=list)

    def get_package(self, spdx_id: ElementID | str) -> Optional[Package]:
        """Return the package identified by *spdx_id*, if any."""
        for pkg in self.packages:
            if pkg.spdx_id == spdx_id:
                return pkg
        return None

    def get_file(self, spdx_id: ElementID | str) -> Optional[File]:
        """Return the file identified by *spdx_id*, if any."""
        for f in self.files:
            if f.spdx_id == spdx_id:
                return f
        return None

    def package_files(self, package: Package) -> list[File]:
        """Return the files described inside the section of *package*."""
        return [f for f in self.files if f.spdx_id in package.file_ids]

    def unpackaged_files(self) -> list[File]:
        """Return the files described outside of any package section."""
        packaged = {fid for pkg in self.packages for fid in pkg.file_ids}
        return [f for f in self.files if f.spdx_id not in packaged]

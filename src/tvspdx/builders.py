"""Tag tables and construction routines of the document entities.

Each entity kind is described by a :class:`Section`: the header tag that
opens a new instance (if any), how to build that instance from the header
value, and the table of the other tags the section owns. The tables are
ordered: :mod:`tvspdx.writer` renders fields in table order.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from tvspdx.extract import (
    extract_actor,
    extract_annotation_type,
    extract_bool,
    extract_checksum,
    extract_doc_element_id,
    extract_element_id,
    extract_external_document_ref,
    extract_external_ref,
    extract_purpose,
    extract_range,
    extract_relationship,
    extract_supplier,
    extract_verification_code,
)
from tvspdx.model import (
    Annotation,
    ArtifactOfProject,
    CreationInfo,
    Document,
    File,
    OtherLicense,
    Package,
    Review,
    Snippet,
)

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any, Callable, Optional

# Tag setting the identifier of the document, of a package and of a file.
ID_TAG = "SPDXID"


def render_bool(value: bool) -> str:
    return "true" if value else "false"


def render_enum_value(value: Any) -> str:
    return value.value


@dataclass(frozen=True)
class FieldRule:
    """Describe how one tag populates one attribute of an entity.

    :ivar attr: name of the entity attribute
    :ivar multi: the tag may repeat, each occurrence is appended to the
        attribute list. Otherwise the tag sets the attribute.
    :ivar parse: converts the tag value, the raw string is kept when None
    :ivar render: converts the attribute (or list item) back to a tag value
    :ivar text: the value is free text, written between ``<text>`` markers
    :ivar presence_attr: boolean attribute set when the tag is seen
    """

    attr: str
    multi: bool = False
    parse: Optional[Callable[[str], Any]] = None
    render: Callable[[Any], str] = str
    text: bool = False
    presence_attr: Optional[str] = None


@dataclass(frozen=True)
class Section:
    """Describe one kind of entity of the tag-value format.

    :ivar kind: human readable name of the entity kind
    :ivar header: tag opening a new entity, None when the entity is not
        opened by a tag (document, creation information)
    :ivar open: builds a fresh entity from the header value
    :ivar render_header: converts the entity back to its header value
    :ivar fields: the other tags owned by the section
    """

    kind: str
    header: Optional[str]
    open: Callable[[str], Any]
    render_header: Optional[Callable[[Any], str]] = None
    fields: dict[str, FieldRule] = field(default_factory=dict)


DOCUMENT = Section(
    kind="Document",
    header=None,
    open=lambda _: Document(),
    fields={
        "SPDXVersion": FieldRule("spdx_version"),
        "DataLicense": FieldRule("data_license"),
        ID_TAG: FieldRule("spdx_id", parse=extract_element_id),
        "DocumentName": FieldRule("name"),
        "DocumentNamespace": FieldRule("namespace"),
        "ExternalDocumentRef": FieldRule(
            "external_document_refs", multi=True, parse=extract_external_document_ref
        ),
        "DocumentComment": FieldRule("comment", text=True),
    },
)

CREATION_INFO = Section(
    kind="CreationInfo",
    header=None,
    open=lambda _: CreationInfo(),
    fields={
        "Creator": FieldRule("creators", multi=True, parse=extract_actor),
        "Created": FieldRule("created"),
        "CreatorComment": FieldRule("creator_comment", text=True),
        "LicenseListVersion": FieldRule("license_list_version"),
    },
)

PACKAGE = Section(
    kind="Package",
    header="PackageName",
    open=lambda value: Package(name=value),
    render_header=lambda pkg: pkg.name,
    fields={
        "PackageVersion": FieldRule("version"),
        "PackageFileName": FieldRule("file_name"),
        "PackageSupplier": FieldRule("supplier", parse=extract_supplier),
        "PackageOriginator": FieldRule("originator", parse=extract_supplier),
        "PackageDownloadLocation": FieldRule("download_location"),
        "FilesAnalyzed": FieldRule(
            "files_analyzed",
            parse=extract_bool,
            render=render_bool,
            presence_attr="files_analyzed_tag_present",
        ),
        "PackageVerificationCode": FieldRule(
            "verification_code", parse=extract_verification_code
        ),
        "PackageChecksum": FieldRule("checksums", multi=True, parse=extract_checksum),
        "PackageHomePage": FieldRule("home_page"),
        "PackageSourceInfo": FieldRule("source_info", text=True),
        "PackageLicenseConcluded": FieldRule("license_concluded"),
        "PackageLicenseInfoFromFiles": FieldRule(
            "license_info_from_files", multi=True
        ),
        "PackageLicenseDeclared": FieldRule("license_declared"),
        "PackageLicenseComments": FieldRule("license_comments", text=True),
        "PackageCopyrightText": FieldRule("copyright_text", text=True),
        "PackageSummary": FieldRule("summary", text=True),
        "PackageDescription": FieldRule("description", text=True),
        "PackageComment": FieldRule("comment", text=True),
        "ExternalRef": FieldRule(
            "external_refs", multi=True, parse=extract_external_ref
        ),
        "PackageAttributionText": FieldRule(
            "attribution_texts", multi=True, text=True
        ),
        "PrimaryPackagePurpose": FieldRule("primary_purpose", parse=extract_purpose),
        "ReleaseDate": FieldRule("release_date"),
        "BuiltDate": FieldRule("built_date"),
        "ValidUntilDate": FieldRule("valid_until_date"),
    },
)

FILE = Section(
    kind="File",
    header="FileName",
    open=lambda value: File(name=value),
    render_header=lambda f: f.name,
    fields={
        "FileType": FieldRule("file_types", multi=True),
        "FileChecksum": FieldRule("checksums", multi=True, parse=extract_checksum),
        "LicenseConcluded": FieldRule("license_concluded"),
        "LicenseInfoInFile": FieldRule("license_info_in_files", multi=True),
        "LicenseComments": FieldRule("license_comments", text=True),
        "FileCopyrightText": FieldRule("copyright_text", text=True),
        "ArtifactOfProjectName": FieldRule(
            "artifact_of_projects",
            multi=True,
            parse=lambda value: ArtifactOfProject(name=value),
            render=lambda aop: aop.name,
        ),
        "FileComment": FieldRule("comment", text=True),
        "FileNotice": FieldRule("notice", text=True),
        "FileContributor": FieldRule("contributors", multi=True),
        "FileDependency": FieldRule("dependencies", multi=True),
        "FileAttributionText": FieldRule("attribution_texts", multi=True, text=True),
    },
)

SNIPPET = Section(
    kind="Snippet",
    header="SnippetSPDXID",
    open=lambda value: Snippet(spdx_id=extract_element_id(value)),
    render_header=lambda snippet: str(snippet.spdx_id),
    fields={
        "SnippetFromFileSPDXID": FieldRule("from_file_id", parse=extract_element_id),
        "SnippetByteRange": FieldRule("byte_ranges", multi=True, parse=extract_range),
        "SnippetLineRange": FieldRule("line_ranges", multi=True, parse=extract_range),
        "SnippetLicenseConcluded": FieldRule("license_concluded"),
        "LicenseInfoInSnippet": FieldRule("license_info_in_snippets", multi=True),
        "SnippetLicenseComments": FieldRule("license_comments", text=True),
        "SnippetCopyrightText": FieldRule("copyright_text", text=True),
        "SnippetComment": FieldRule("comment", text=True),
        "SnippetName": FieldRule("name"),
        "SnippetAttributionText": FieldRule(
            "attribution_texts", multi=True, text=True
        ),
    },
)

OTHER_LICENSE = Section(
    kind="OtherLicense",
    header="LicenseID",
    open=lambda value: OtherLicense(license_id=value),
    render_header=lambda lic: lic.license_id,
    fields={
        "ExtractedText": FieldRule("extracted_text", text=True),
        "LicenseName": FieldRule("name"),
        "LicenseCrossReference": FieldRule("cross_references", multi=True),
        "LicenseComment": FieldRule("comment", text=True),
    },
)

REVIEW = Section(
    kind="Review",
    header="Reviewer",
    open=lambda value: Review(reviewer=extract_actor(value)),
    render_header=lambda review: str(review.reviewer),
    fields={
        "ReviewDate": FieldRule("date"),
        "ReviewComment": FieldRule("comment", text=True),
    },
)

RELATIONSHIP = Section(
    kind="Relationship",
    header="Relationship",
    open=extract_relationship,
    render_header=str,
    fields={"RelationshipComment": FieldRule("comment", text=True)},
)

ANNOTATION = Section(
    kind="Annotation",
    header="Annotator",
    open=lambda value: Annotation(annotator=extract_actor(value)),
    render_header=lambda ann: str(ann.annotator),
    fields={
        "AnnotationDate": FieldRule("date"),
        "AnnotationType": FieldRule(
            "annotation_type", parse=extract_annotation_type, render=render_enum_value
        ),
        "SPDXREF": FieldRule("spdx_ref", parse=extract_doc_element_id),
        "AnnotationComment": FieldRule("comment", text=True),
    },
)


class DuplicateValue(Exception):
    """Raised by :func:`build` when a set-once tag is repeated in strict mode.

    :ivar kind: kind of the section holding the repeated tag
    """

    def __init__(self, kind: str) -> None:
        super().__init__(kind)
        self.kind = kind


def build(
    section: Section,
    entity: Any,
    tag: str,
    value: str,
    seen: set[str],
    strict: bool = False,
) -> bool:
    """Populate *entity* with one tag of *section*.

    :param section: the section *entity* belongs to
    :param entity: the open entity to update
    :param tag: the tag
    :param value: the tag value
    :param seen: the tags already applied to *entity*, updated in place
    :param strict: when True a repeated set-once tag raises
        :class:`DuplicateValue`, otherwise the last value wins
    :return: False if *tag* is not owned by *section*, True otherwise
    :raise ExtractionError: if *value* is malformed
    """
    rule = section.fields.get(tag)
    if rule is None:
        return False

    parsed = value if rule.parse is None else rule.parse(value)
    if rule.multi:
        getattr(entity, rule.attr).append(parsed)
    else:
        if strict and tag in seen:
            raise DuplicateValue(section.kind)
        setattr(entity, rule.attr, parsed)
    if rule.presence_attr is not None:
        setattr(entity, rule.presence_attr, True)
    seen.add(tag)
    return True

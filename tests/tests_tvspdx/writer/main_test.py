from __future__ import annotations

from tvspdx.model import (
    NOASSERTION,
    Checksum,
    ChecksumAlgorithm,
    Document,
    ElementID,
    File,
    Package,
)
from tvspdx.parser import parse_tag_values
from tvspdx.reader import read_tag_values
from tvspdx.writer import format_pair, write_tagvalue

GLIBC_SPDX = """\
# Document Information

SPDXVersion: SPDX-2.3
DataLicense: CC0-1.0
SPDXID: SPDXRef-DOCUMENT
DocumentName: glibc
DocumentNamespace: https://example.org/spdx/glibc-2.38
ExternalDocumentRef: DocumentRef-zlib https://example.org/zlib SHA1: d6a770ba38
DocumentComment: <text>Generated for
the testsuite</text>

# Creation Info

Creator: Organization: AdaCore
Creator: Tool: tvspdx-1.0
Created: 2023-10-02T12:34:56Z
LicenseListVersion: 3.21

# Snippet

SnippetSPDXID: SPDXRef-Snippet-orphan
SnippetFromFileSPDXID: SPDXRef-File-README
SnippetLineRange: 1:2

# File

FileName: ./README
SPDXID: SPDXRef-File-README
FileChecksum: SHA1: 85ed0817af83a24ad8da68c2b5094de69833983c
FileCopyrightText: NOASSERTION

# Package

PackageName: glibc
SPDXID: SPDXRef-Package-glibc
PackageVersion: 2.38
PackageSupplier: Organization: GNU
PackageOriginator: NOASSERTION
PackageDownloadLocation: https://ftp.gnu.org/gnu/glibc
FilesAnalyzed: false
PackageVerificationCode: d6a770ba38583ed4bb4525bd96e50461655d2758 (excludes: ./x)
PackageChecksum: SHA256: 00ff
PackageLicenseConcluded: LGPL-2.1-or-later
PackageLicenseInfoFromFiles: LGPL-2.1-or-later
PackageLicenseInfoFromFiles: GPL-2.0-or-later
PackageCopyrightText: <text>Copyright (C) 1991-2023
Free Software Foundation, Inc.</text>
ExternalRef: SECURITY cpe23Type cpe:2.3:a:gnu:glibc:2.38:*:*:*:*:*:*:*
ExternalRefComment: <text>from NVD</text>
PrimaryPackagePurpose: OPERATING-SYSTEM
ReleaseDate: 2023-07-31T00:00:00Z

FileName: ./malloc/malloc.c
SPDXID: SPDXRef-File-malloc
FileType: SOURCE
LicenseInfoInFile: LGPL-2.1-or-later
ArtifactOfProjectName: glibc
ArtifactOfProjectHomePage: https://www.gnu.org/software/libc
FileContributor: Jane Doe

SnippetSPDXID: SPDXRef-Snippet-arena
SnippetByteRange: 310:420
SnippetLicenseConcluded: LGPL-2.1-or-later
SnippetName: arena

PackageName: zlib
SPDXID: SPDXRef-Package-zlib
PackageDownloadLocation: NONE

Relationship: SPDXRef-DOCUMENT DESCRIBES SPDXRef-Package-glibc
RelationshipComment: main package
Relationship: SPDXRef-Package-glibc DEPENDS_ON DocumentRef-zlib:SPDXRef-zlib
Annotator: Person: Jane Doe
AnnotationDate: 2023-10-03T08:00:00Z
AnnotationType: OTHER
SPDXREF: SPDXRef-Package-zlib
AnnotationComment: <text>vendored</text>

# Other License

LicenseID: LicenseRef-1
ExtractedText: <text>Permission is granted
to do anything.</text>
LicenseName: Custom
LicenseCrossReference: https://example.org/license

# Review

Reviewer: Person: John Doe
ReviewDate: 2023-10-04T00:00:00Z
ReviewComment: looks fine
"""


def parse_text(content: str) -> Document:
    return parse_tag_values(read_tag_values(content), strict=True)


def test_round_trip():
    doc = parse_text(GLIBC_SPDX)
    lines = write_tagvalue(doc)
    assert parse_text("\n".join(lines)) == doc

    # Writing is stable once normalized
    assert write_tagvalue(parse_text("\n".join(lines))) == lines


def test_write_sections():
    doc = parse_text(GLIBC_SPDX)
    lines = write_tagvalue(doc)

    assert lines[:3] == ["# Document Information", "", "SPDXVersion: SPDX-2.3"]
    assert "DocumentComment: <text>Generated for\nthe testsuite</text>" in lines
    # Special values are never wrapped in <text>
    assert "FileCopyrightText: NOASSERTION" in lines
    assert "PackageVerificationCode: d6a770ba38583ed4bb4525bd96e50461655d2758" \
        " (excludes: ./x)" in lines

    # Relationships and annotations come first so that they do not depend on
    # the section they were found in.
    relationship = lines.index(
        "Relationship: SPDXRef-DOCUMENT DESCRIBES SPDXRef-Package-glibc"
    )
    assert lines[relationship + 1] == "RelationshipComment: <text>main package</text>"
    assert relationship < lines.index("PackageName: glibc")

    # Sub-records follow the tag they complete
    ext_ref = lines.index(
        "ExternalRef: SECURITY cpe23Type cpe:2.3:a:gnu:glibc:2.38:*:*:*:*:*:*:*"
    )
    assert lines[ext_ref + 1] == "ExternalRefComment: <text>from NVD</text>"
    aop = lines.index("ArtifactOfProjectName: glibc")
    assert lines[aop + 1] == "ArtifactOfProjectHomePage: https://www.gnu.org/software/libc"

    # Files follow their package, snippets follow their file
    order = [
        lines.index("FileName: ./README"),
        lines.index("PackageName: glibc"),
        lines.index("FileName: ./malloc/malloc.c"),
        lines.index("SnippetSPDXID: SPDXRef-Snippet-arena"),
        lines.index("PackageName: zlib"),
        lines.index("LicenseID: LicenseRef-1"),
        lines.index("Reviewer: Person: John Doe"),
    ]
    assert order == sorted(order)
    assert lines.index("SnippetSPDXID: SPDXRef-Snippet-orphan") < order[0]


def test_files_analyzed_presence():
    doc = Document(spdx_version="SPDX-2.3")
    doc.packages.append(Package(name="p", spdx_id=ElementID("p")))
    lines = write_tagvalue(doc)
    assert not any(line.startswith("FilesAnalyzed") for line in lines)

    doc.packages[0].files_analyzed_tag_present = True
    assert "FilesAnalyzed: true" in write_tagvalue(doc)


def test_write_built_document():
    doc = Document(spdx_version="SPDX-2.3", name="built")
    doc.files.append(
        File(
            name="./a.c",
            spdx_id=ElementID("SPDXRef-a"),
            checksums=[Checksum(ChecksumAlgorithm.MD5, "d41d8cd98f00b204")],
        )
    )
    assert write_tagvalue(doc) == [
        "# Document Information",
        "",
        "SPDXVersion: SPDX-2.3",
        "DocumentName: built",
        "",
        "# File",
        "",
        "FileName: ./a.c",
        "SPDXID: SPDXRef-a",
        "FileChecksum: MD5: d41d8cd98f00b204",
    ]


def test_format_pair():
    assert format_pair("PackageName", "glibc") == "PackageName: glibc"
    assert format_pair("PackageComment", "a\nb", text=True) == (
        "PackageComment: <text>a\nb</text>"
    )
    assert format_pair("PackageComment", NOASSERTION, text=True) == (
        "PackageComment: NOASSERTION"
    )

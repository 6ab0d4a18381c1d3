from __future__ import annotations

import pytest

from tvspdx.extract import (
    ExtractionError,
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
    extract_subs,
    extract_supplier,
    extract_verification_code,
)
from tvspdx.model import (
    NOASSERTION,
    NONE_VALUE,
    Actor,
    ActorType,
    AnnotationType,
    Checksum,
    ChecksumAlgorithm,
    ElementID,
    ExternalRefCategory,
    PrimaryPackagePurpose,
    RelationshipType,
    SnippetRange,
)


def test_extract_subs():
    assert extract_subs("Person: John Doe (john@example.org)") == (
        "Person",
        "John Doe (john@example.org)",
    )
    # Only the first colon separates
    assert extract_subs("Tool: spdx:tools-1.0") == ("Tool", "spdx:tools-1.0")

    with pytest.raises(ExtractionError, match="no colon found"):
        extract_subs("Person John Doe")


def test_extract_element_id():
    element_id = extract_element_id("SPDXRef-Package-glibc")
    assert element_id.value == "Package-glibc"
    assert str(element_id) == "SPDXRef-Package-glibc"
    assert element_id == "SPDXRef-Package-glibc"
    assert element_id == ElementID("Package-glibc")
    assert extract_element_id("SPDXRef-libc.so.6") == "SPDXRef-libc.so.6"


@pytest.mark.parametrize(
    "value,reason",
    [
        ("Package-glibc", "missing SPDXRef- prefix"),
        ("SPDXRef-", "nothing after prefix"),
        ("SPDXRef-a:b", "invalid colon"),
        ("SPDXRef-glibc_2", "invalid character"),
        ("SPDXRef-a b", "invalid character"),
    ],
)
def test_extract_element_id_invalid(value, reason):
    with pytest.raises(ExtractionError, match=reason):
        extract_element_id(value)


def test_extract_doc_element_id():
    local = extract_doc_element_id("SPDXRef-File-1")
    assert local.document_ref_id is None
    assert local.element_id == "SPDXRef-File-1"
    assert str(local) == "SPDXRef-File-1"

    remote = extract_doc_element_id("DocumentRef-glibc:SPDXRef-Package-glibc")
    assert remote.document_ref_id == "DocumentRef-glibc"
    assert remote.element_id == "SPDXRef-Package-glibc"
    assert str(remote) == "DocumentRef-glibc:SPDXRef-Package-glibc"

    special = extract_doc_element_id(NONE_VALUE, permitted_special=(NONE_VALUE,))
    assert special.special == NONE_VALUE
    assert special.element_id is None
    assert str(special) == "NONE"

    with pytest.raises(ExtractionError, match="missing SPDXRef- prefix"):
        extract_doc_element_id(NONE_VALUE)
    with pytest.raises(ExtractionError, match="no colon found"):
        extract_doc_element_id("DocumentRef-glibc")
    with pytest.raises(ExtractionError, match="more than one colon"):
        extract_doc_element_id("DocumentRef-a:SPDXRef-b:c")
    with pytest.raises(ExtractionError, match="nothing after prefix"):
        extract_doc_element_id("DocumentRef-:SPDXRef-b")


def test_extract_checksum():
    checksum = extract_checksum("SHA1: 85ed0817af83a24ad8da68c2b5094de69833983c")
    assert checksum == Checksum(
        ChecksumAlgorithm.SHA1, "85ed0817af83a24ad8da68c2b5094de69833983c"
    )
    assert extract_checksum("SHA3-256:abcdef").algorithm == ChecksumAlgorithm.SHA3_256
    assert extract_checksum("BLAKE2b-512: 00").algorithm == ChecksumAlgorithm.BLAKE2B_512
    assert str(extract_checksum("MD5:d41d8cd98f00b204")) == "MD5: d41d8cd98f00b204"


def test_extract_checksum_invalid():
    with pytest.raises(ExtractionError) as err:
        extract_checksum("MD9: 624c1abb3664f4b35547e7c73864ad24")
    assert "unknown checksum algorithm" in str(err.value)
    assert "MD9" in str(err.value)

    with pytest.raises(ExtractionError, match="missing ':' separator"):
        extract_checksum("SHA1 85ed0817af83a24ad8da68c2b5094de69833983c")
    with pytest.raises(ExtractionError, match="missing SHA1 checksum value"):
        extract_checksum("SHA1:")
    with pytest.raises(ExtractionError, match="not hexadecimal"):
        extract_checksum("SHA1: not-an-hex-digest")


def test_extract_external_document_ref():
    ref = extract_external_document_ref(
        "DocumentRef-1 https://example.org/doc SHA1: abc123"
    )
    assert ref.document_ref_id == "DocumentRef-1"
    assert ref.uri == "https://example.org/doc"
    assert ref.checksum == Checksum(ChecksumAlgorithm.SHA1, "abc123")
    assert str(ref) == "DocumentRef-1 https://example.org/doc SHA1: abc123"

    joined = extract_external_document_ref(
        "DocumentRef-spdx-tool-1.2 http://spdx.org/spdxdocs/tool SHA1:d6a770ba38"
    )
    assert joined.document_ref_id == "DocumentRef-spdx-tool-1.2"
    assert joined.checksum == Checksum(ChecksumAlgorithm.SHA1, "d6a770ba38")


@pytest.mark.parametrize(
    "value,reason",
    [
        ("DocumentRef-1 https://example.org/doc", "got 2 elements"),
        ("DocumentRef-1 https://example.org/doc SHA1 abc123", "does not end with colon"),
        ("DocumentRef-1 https://example.org/doc abc123", "missing colon separator"),
        ("Doc-1 https://example.org/doc SHA1:abc123", "DocumentRef- prefix"),
        ("DocumentRef- https://example.org/doc SHA1:abc123", "nothing after prefix"),
        ("DocumentRef-1 https://example.org/doc MD9: abc123", "unknown checksum"),
    ],
)
def test_extract_external_document_ref_invalid(value, reason):
    with pytest.raises(ExtractionError, match=reason):
        extract_external_document_ref(value)


def test_extract_external_ref():
    ref = extract_external_ref(
        "SECURITY cpe23Type cpe:2.3:a:gnu:glibc:2.38:*:*:*:*:*:*:*"
    )
    assert ref.reference_category == ExternalRefCategory.security
    assert ref.reference_type == "cpe23Type"
    assert ref.reference_locator == "cpe:2.3:a:gnu:glibc:2.38:*:*:*:*:*:*:*"
    assert ref.comment is None

    for category in ("PACKAGE-MANAGER", "PACKAGE_MANAGER"):
        ref = extract_external_ref(f"{category} purl pkg:generic/glibc@2.38")
        assert ref.reference_category == ExternalRefCategory.package_manager
        assert str(ref) == "PACKAGE-MANAGER purl pkg:generic/glibc@2.38"

    with pytest.raises(ExtractionError, match="expected 3 elements"):
        extract_external_ref("SECURITY cpe23Type")
    with pytest.raises(ExtractionError, match="unknown external reference category"):
        extract_external_ref("BUILD purl pkg:generic/glibc@2.38")


def test_extract_actor():
    assert extract_actor("Organization: AdaCore") == Actor(
        ActorType.ORGANIZATION, "AdaCore"
    )
    assert extract_actor("Tool: tvspdx-1.0") == Actor(ActorType.TOOL, "tvspdx-1.0")
    assert str(extract_actor("Person: Jane Doe ()")) == "Person: Jane Doe ()"

    with pytest.raises(ExtractionError, match="unrecognized entity type"):
        extract_actor("Robot: R2D2")
    with pytest.raises(ExtractionError, match="missing Person name"):
        extract_actor("Person: ")
    with pytest.raises(ExtractionError, match="no colon found"):
        extract_actor(NOASSERTION)


def test_extract_supplier():
    assert extract_supplier(NOASSERTION) == NOASSERTION
    assert extract_supplier("Person: Jane Doe") == Actor(ActorType.PERSON, "Jane Doe")
    with pytest.raises(ExtractionError, match="expected one of Person, Organization"):
        extract_supplier("Tool: tvspdx")


def test_extract_verification_code():
    code = extract_verification_code("d6a770ba38583ed4bb4525bd96e50461655d2758")
    assert code.value == "d6a770ba38583ed4bb4525bd96e50461655d2758"
    assert code.excluded_files == ()

    code = extract_verification_code(
        "d6a770ba38583ed4bb4525bd96e50461655d2758 (excludes: ./package.spdx, ./a.txt)"
    )
    assert code.value == "d6a770ba38583ed4bb4525bd96e50461655d2758"
    assert code.excluded_files == ("./package.spdx", "./a.txt")
    assert str(code) == (
        "d6a770ba38583ed4bb4525bd96e50461655d2758 (excludes: ./package.spdx, ./a.txt)"
    )


def test_extract_range():
    assert extract_range("310:420") == SnippetRange(310, 420)
    assert extract_range(" 5 : 5 ") == SnippetRange(5, 5)
    assert str(extract_range("5:23")) == "5:23"

    with pytest.raises(ExtractionError, match="invalid range"):
        extract_range("a:b")
    with pytest.raises(ExtractionError, match="greater than its end"):
        extract_range("420:310")
    with pytest.raises(ExtractionError, match="no colon found"):
        extract_range("310")


def test_extract_simple_values():
    assert extract_bool("true") is True
    assert extract_bool("false") is False
    with pytest.raises(ExtractionError, match="expected 'true' or 'false'"):
        extract_bool("True")

    assert extract_purpose("LIBRARY") == PrimaryPackagePurpose.LIBRARY
    assert extract_purpose("OPERATING-SYSTEM") == PrimaryPackagePurpose.OPERATING_SYSTEM
    assert extract_purpose("OPERATING_SYSTEM") == PrimaryPackagePurpose.OPERATING_SYSTEM
    assert str(PrimaryPackagePurpose.OPERATING_SYSTEM) == "OPERATING-SYSTEM"
    with pytest.raises(ExtractionError, match="unknown primary package purpose"):
        extract_purpose("PLUGIN")

    assert extract_annotation_type("REVIEW") == AnnotationType.REVIEW
    with pytest.raises(ExtractionError, match="unknown annotation type"):
        extract_annotation_type("COMMENT")


def test_extract_relationship():
    rel = extract_relationship("SPDXRef-DOCUMENT DESCRIBES SPDXRef-Package-glibc")
    assert rel.element_id.element_id == "SPDXRef-DOCUMENT"
    assert rel.relationship_type == RelationshipType.DESCRIBES
    assert rel.related_element_id.element_id == "SPDXRef-Package-glibc"
    assert rel.comment is None
    assert str(rel) == "SPDXRef-DOCUMENT DESCRIBES SPDXRef-Package-glibc"

    rel = extract_relationship("SPDXRef-File-1 DEPENDS_ON  NOASSERTION")
    assert rel.related_element_id.special == NOASSERTION

    rel = extract_relationship("SPDXRef-DOCUMENT COPY_OF DocumentRef-x:SPDXRef-y")
    assert rel.related_element_id.document_ref_id == "DocumentRef-x"

    with pytest.raises(ExtractionError, match="invalid relationship format"):
        extract_relationship("SPDXRef-DOCUMENT DESCRIBES")
    with pytest.raises(ExtractionError, match="unknown relationship type"):
        extract_relationship("SPDXRef-DOCUMENT LIKES SPDXRef-File-1")
    # Special values are only accepted on the right hand side
    with pytest.raises(ExtractionError, match="missing SPDXRef- prefix"):
        extract_relationship("NONE DESCRIBES SPDXRef-File-1")

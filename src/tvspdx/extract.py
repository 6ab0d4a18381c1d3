"""Parse the compound values of the tag-value format.

Every helper is a pure function: it either returns a structured value or
raises :class:`ExtractionError` describing why the value is malformed.
"""

from __future__ import annotations

import re

from tvspdx.error import TagValueError
from tvspdx.model import (
    DOCUMENTREF_PREFIX,
    NOASSERTION,
    NONE_VALUE,
    SPDXREF_PREFIX,
    Actor,
    ActorType,
    AnnotationType,
    Checksum,
    ChecksumAlgorithm,
    DocElementID,
    ElementID,
    ExternalDocumentRef,
    ExternalRef,
    ExternalRefCategory,
    PackageVerificationCode,
    PrimaryPackagePurpose,
    Relationship,
    RelationshipType,
    SnippetRange,
)

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Iterable
    from tvspdx.model import MAYBE_ACTOR

# [idstring] is a unique string containing letters, numbers, ., and/or -.
IDSTRING_R = re.compile(r"^[a-zA-Z0-9.\-]+$")
HEX_R = re.compile(r"^[0-9a-fA-F]+$")
EXCLUDES_R = re.compile(r"^(?P<code>[^(]*?)\s*\(\s*excludes:\s*(?P<files>[^)]*)\)")


class ExtractionError(TagValueError):
    """Raised when a compound value does not follow its grammar."""

    pass


def extract_subs(value: str) -> tuple[str, str]:
    """Split a ``<key>: <value>`` string on its first colon.

    :param value: the string to split
    :return: the stripped key and value
    :raise ExtractionError: if there is no colon in *value*
    """
    key, sep, subvalue = value.partition(":")
    if not sep:
        raise ExtractionError(f"invalid subvalue format for {value} (no colon found)")
    return key.strip(), subvalue.strip()


def extract_element_id(value: str) -> ElementID:
    """Parse an ``SPDXRef-<idstring>`` identifier of the current document.

    :param value: the identifier as found in the tag-value document
    :raise ExtractionError: if the prefix is missing, if the identifier is
        empty, or if it contains characters other than letters, digits,
        ``.`` and ``-``
    """
    if not value.startswith(SPDXREF_PREFIX):
        raise ExtractionError(
            f"missing {SPDXREF_PREFIX} prefix for element identifier {value!r}"
        )
    if ":" in value:
        raise ExtractionError(f"invalid colon in element identifier {value!r}")
    idstring = value[len(SPDXREF_PREFIX) :]
    if not idstring:
        raise ExtractionError("element identifier has nothing after prefix")
    if IDSTRING_R.match(idstring) is None:
        raise ExtractionError(
            f"invalid character in element identifier {value!r}"
            " (only letters, numbers, '.' and '-' are allowed)"
        )
    return ElementID(idstring)


def extract_doc_element_id(
    value: str, permitted_special: Iterable[str] = ()
) -> DocElementID:
    """Parse an identifier that may point to another document.

    The value is either ``SPDXRef-<id>``, ``DocumentRef-<doc>:SPDXRef-<id>``,
    or, when listed in *permitted_special*, a special value such as
    ``NONE`` or ``NOASSERTION``.

    :param value: the identifier as found in the tag-value document
    :param permitted_special: special values accepted verbatim
    :raise ExtractionError: if *value* is not a valid identifier
    """
    if value in permitted_special:
        return DocElementID(special=value)

    document_ref_id = None
    id_str = value
    if value.startswith(DOCUMENTREF_PREFIX):
        parts = value.split(":")
        if len(parts) < 2:
            raise ExtractionError(
                f"no colon found although {DOCUMENTREF_PREFIX} prefix present"
            )
        if len(parts) > 2:
            raise ExtractionError(f"more than one colon found in {value!r}")
        document_ref_id, id_str = parts
        if document_ref_id == DOCUMENTREF_PREFIX:
            raise ExtractionError("document identifier has nothing after prefix")

    return DocElementID(
        element_id=extract_element_id(id_str), document_ref_id=document_ref_id
    )


def extract_checksum(value: str) -> Checksum:
    """Parse a ``<algorithm>: <hex digest>`` value.

    >>> from tvspdx.extract import extract_checksum
    >>> str(extract_checksum("SHA1: 85ed0817af83a24ad8da68c2b5094de69833983c"))
    'SHA1: 85ed0817af83a24ad8da68c2b5094de69833983c'

    :raise ExtractionError: if there is no separator, if the algorithm is not
        a known :class:`ChecksumAlgorithm`, or if the digest is not
        hexadecimal
    """
    algorithm, sep, digest = (part.strip() for part in value.partition(":"))
    if not sep:
        raise ExtractionError(
            f"missing ':' separator between checksum algorithm and value in"
            f" {value!r}"
        )
    try:
        alg = ChecksumAlgorithm(algorithm)
    except ValueError:
        raise ExtractionError(f"unknown checksum algorithm {algorithm!r}") from None
    if not digest:
        raise ExtractionError(f"missing {algorithm} checksum value")
    if HEX_R.match(digest) is None:
        raise ExtractionError(f"checksum value {digest!r} is not hexadecimal")
    return Checksum(algorithm=alg, value=digest)


def split_tokens(value: str) -> list[str]:
    """Split *value* on whitespace, dropping empty tokens."""
    return value.split()


def extract_external_document_ref(value: str) -> ExternalDocumentRef:
    """Parse an ``ExternalDocumentRef`` value.

    The value is ``<DocumentRef-id> <URI> <algorithm>: <digest>``, the
    algorithm and digest may also be joined (``SHA1:abc``).

    :raise ExtractionError: if an element is missing, if the reference id
        lacks its ``DocumentRef-`` prefix or if the checksum is malformed
    """
    tokens = split_tokens(value)
    if len(tokens) == 4:
        document_ref_id, uri, algorithm, digest = tokens
        if not algorithm.endswith(":"):
            raise ExtractionError(
                f"checksum algorithm {algorithm!r} does not end with colon"
            )
        checksum_value = f"{algorithm} {digest}"
    elif len(tokens) == 3:
        document_ref_id, uri, checksum_value = tokens
        if ":" not in checksum_value:
            raise ExtractionError(
                "missing colon separator between algorithm and checksum"
            )
    else:
        raise ExtractionError(
            "expected '<DocumentRef-id> <URI> <algorithm>: <checksum>',"
            f" got {len(tokens)} elements"
        )

    if not document_ref_id.startswith(DOCUMENTREF_PREFIX):
        raise ExtractionError(
            f"expected first element to have {DOCUMENTREF_PREFIX} prefix"
        )
    if document_ref_id == DOCUMENTREF_PREFIX:
        raise ExtractionError("document identifier has nothing after prefix")

    return ExternalDocumentRef(
        document_ref_id=document_ref_id,
        uri=uri,
        checksum=extract_checksum(checksum_value),
    )


def extract_external_ref(value: str) -> ExternalRef:
    """Parse a package ``ExternalRef`` value: ``<category> <type> <locator>``.

    The ``PACKAGE_MANAGER`` spelling of the category is accepted as well.
    """
    tokens = split_tokens(value)
    if len(tokens) != 3:
        raise ExtractionError(f"expected 3 elements, got {len(tokens)}")
    category, reference_type, locator = tokens
    try:
        reference_category = ExternalRefCategory(category.replace("_", "-"))
    except ValueError:
        raise ExtractionError(
            f"unknown external reference category {category!r}"
        ) from None
    return ExternalRef(
        reference_category=reference_category,
        reference_type=reference_type,
        reference_locator=locator,
    )


def extract_actor(
    value: str,
    allowed: Iterable[ActorType] = tuple(ActorType),
    allow_noassertion: bool = False,
) -> MAYBE_ACTOR:
    """Parse an entity string such as ``Organization: AdaCore``.

    :param value: the string to parse
    :param allowed: the entity types accepted
    :param allow_noassertion: whether ``NOASSERTION`` is an accepted value
    :raise ExtractionError: if *value* is not a known entity
    """
    if allow_noassertion and value == NOASSERTION:
        return NOASSERTION
    actor_type, name = extract_subs(value)
    allowed_types = tuple(allowed)
    try:
        kind = ActorType(actor_type)
    except ValueError:
        kind = None
    if kind is None or kind not in allowed_types:
        expected = ", ".join(t.value for t in allowed_types)
        raise ExtractionError(
            f"unrecognized entity type {actor_type!r} (expected one of {expected})"
        )
    if not name:
        raise ExtractionError(f"missing {actor_type} name")
    return Actor(actor_type=kind, name=name)


def extract_supplier(value: str) -> MAYBE_ACTOR:
    """Parse a package supplier or originator: a person, an organization."""
    return extract_actor(
        value,
        allowed=(ActorType.PERSON, ActorType.ORGANIZATION),
        allow_noassertion=True,
    )


def extract_verification_code(value: str) -> PackageVerificationCode:
    """Parse ``<code>`` or ``<code> (excludes: <file>, <file>...)``."""
    m = EXCLUDES_R.match(value)
    if m is None:
        return PackageVerificationCode(value=value.strip())
    excluded = tuple(f.strip() for f in m.group("files").split(",") if f.strip())
    return PackageVerificationCode(value=m.group("code"), excluded_files=excluded)


def extract_range(value: str) -> SnippetRange:
    """Parse a ``<start>:<end>`` snippet range.

    :raise ExtractionError: if the bounds are not integers or if start is
        greater than end
    """
    start, end = extract_subs(value)
    try:
        result = SnippetRange(start=int(start), end=int(end))
    except ValueError:
        raise ExtractionError(f"invalid range {value!r}") from None
    if result.start > result.end:
        raise ExtractionError(f"range start {start} is greater than its end {end}")
    return result


def extract_bool(value: str) -> bool:
    if value == "true":
        return True
    elif value == "false":
        return False
    raise ExtractionError(f"expected 'true' or 'false', got {value!r}")


def extract_purpose(value: str) -> PrimaryPackagePurpose:
    try:
        return PrimaryPackagePurpose[value.replace("-", "_")]
    except KeyError:
        raise ExtractionError(f"unknown primary package purpose {value!r}") from None


def extract_annotation_type(value: str) -> AnnotationType:
    try:
        return AnnotationType(value)
    except ValueError:
        raise ExtractionError(f"unknown annotation type {value!r}") from None


def extract_relationship(value: str) -> Relationship:
    """Parse a ``<element> <RELATIONSHIP_TYPE> <element>`` value.

    The right hand side may be ``NONE`` or ``NOASSERTION``.
    """
    tokens = split_tokens(value)
    if len(tokens) != 3:
        raise ExtractionError(f"invalid relationship format for {value!r}")
    left, rel_type, right = tokens
    try:
        relationship_type = RelationshipType[rel_type]
    except KeyError:
        raise ExtractionError(f"unknown relationship type {rel_type!r}") from None
    return Relationship(
        element_id=extract_doc_element_id(left),
        relationship_type=relationship_type,
        related_element_id=extract_doc_element_id(
            right, permitted_special=(NONE_VALUE, NOASSERTION)
        ),
    )

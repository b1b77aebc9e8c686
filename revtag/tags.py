"""
Reverse or reverse complement auxiliary tags of reverse strand alignments.
"""

import array
from collections import Counter
from enum import Enum
from typing import Optional

import pysam
from revtag import utils


class InvalidTagName(ValueError):
    def __init__(self, name):
        self.name = name
        super().__init__(f"Tag name must be exactly 2 characters: {name}")


class TagMutationFailure(RuntimeError):
    def __init__(self, tag, reason):
        self.tag = tag
        super().__init__(f"Failed to replace tag {tag}: {reason}")


class TagKind(Enum):
    U8_ARRAY = "B:C"
    U16_ARRAY = "B:S"
    U32_ARRAY = "B:I"
    I8_ARRAY = "B:c"
    I16_ARRAY = "B:s"
    I32_ARRAY = "B:i"
    FLOAT_ARRAY = "B:f"
    STRING = "Z"
    OTHER = "other"


# array.array typecodes pysam uses for B tags
ARRAY_KINDS = {
    "B": TagKind.U8_ARRAY,
    "H": TagKind.U16_ARRAY,
    "I": TagKind.U32_ARRAY,
    "b": TagKind.I8_ARRAY,
    "h": TagKind.I16_ARRAY,
    "i": TagKind.I32_ARRAY,
    "f": TagKind.FLOAT_ARRAY,
}

REVERSIBLE = frozenset(ARRAY_KINDS.values()) | {TagKind.STRING}


def validate_tags(names) -> list[str]:
    """Check every tag name is exactly 2 bytes. Order and duplicates are kept.

    >>> validate_tags(["QT", "BC", "QT"])
    ['QT', 'BC', 'QT']
    >>> validate_tags(["Q", "ABC", "BC"])
    Traceback (most recent call last):
    ...
    revtag.tags.InvalidTagName: Tag name must be exactly 2 characters: Q
    """
    result = []
    for name in names:
        if len(name.encode("utf-8")) != 2:
            raise InvalidTagName(name)
        result.append(name)
    return result


def classify(value, value_type: str) -> TagKind:
    """Map a pysam (value, value_type) pair to a TagKind.

    >>> classify(array.array("H", [1, 2]), "BS")
    <TagKind.U16_ARRAY: 'B:S'>
    >>> classify("ACGT", "Z")
    <TagKind.STRING: 'Z'>
    >>> classify(3, "C")
    <TagKind.OTHER: 'other'>
    """
    # pysam reports arrays as "BC", "Bs", "Bf", ...; width comes from the typecode
    if value_type.startswith("B") and isinstance(value, array.array):
        return ARRAY_KINDS.get(value.typecode, TagKind.OTHER)
    if value_type == "Z":
        return TagKind.STRING
    return TagKind.OTHER


def reverse_value(kind: TagKind, value):
    """Reversed copy of value, or None if kind can not be reversed.

    >>> reverse_value(TagKind.I8_ARRAY, array.array("b", [-1, 0, 5]))
    array('b', [5, 0, -1])
    >>> reverse_value(TagKind.STRING, "HELLO")
    'OLLEH'
    """
    if kind not in REVERSIBLE:
        return None
    # slicing keeps the array typecode
    return value[::-1]


def revcomp_value(kind: TagKind, value):
    """Reverse complemented copy of value, or None if kind is not a sequence.

    >>> revcomp_value(TagKind.STRING, "GATT")
    'AATC'
    >>> revcomp_value(TagKind.U8_ARRAY, array.array("B", b"ATCG"))
    array('B', [67, 71, 65, 84])
    """
    if kind is TagKind.STRING:
        return utils.reverse_complement(value)
    if kind is TagKind.U8_ARRAY:
        return array.array("B", utils.reverse_complement_bytes(value.tobytes()))
    return None


def replace_tag(record: pysam.AlignedSegment, tag: str, value, value_type: Optional[str] = None):
    """Remove tag, then insert value under the same name.

    Insert uses replace=False, so the tag must already be gone.
    """
    try:
        record.set_tag(tag, None)
    except (KeyError, ValueError, TypeError) as e:
        raise TagMutationFailure(tag, e) from e
    try:
        record.set_tag(tag, value, value_type=value_type, replace=False)
    except (KeyError, ValueError, TypeError, OverflowError) as e:
        raise TagMutationFailure(tag, e) from e


def reverse_tags_for(
    record: pysam.AlignedSegment,
    rev: list[str],
    revcomp: list[str],
    counter: Optional[Counter] = None,
):
    """
    Mutate record in place: reverse the values of tags in rev, then reverse
    complement the values of tags in revcomp.

    Args:
        record: alignment record.
        rev: validated tag names whose arrays or strings are reversed.
        revcomp: validated tag names whose strings or uint8 arrays are reverse complemented.
        counter: if given, incremented with (tag, operation, kind) for every replaced value.

    A tag missing from the record, or holding a value the operation does not
    handle, is skipped. A tag in both lists is reversed first and the
    reverse complement is applied to the reversed value.
    """
    for operation, tags, transform in (("rev", rev, reverse_value), ("revcomp", revcomp, revcomp_value)):
        for tag in tags:
            if not record.has_tag(tag):
                continue
            value, value_type = record.get_tag(tag, with_value_type=True)
            kind = classify(value, value_type)
            new_value = transform(kind, value)
            if new_value is None:
                continue
            replace_tag(record, tag, new_value, "Z" if kind is TagKind.STRING else None)
            if counter is not None:
                counter[(tag, operation, kind.name)] += 1

"""Field classification and record building."""

from .builder import RecordBuilder, build_record
from .fields import FieldCategory, attribute_for, classify_field

__all__ = [
    "FieldCategory",
    "RecordBuilder",
    "attribute_for",
    "build_record",
    "classify_field",
]

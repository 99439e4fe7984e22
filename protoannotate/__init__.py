"""
protoannotate - annotated hex dumps of protobuf wire data, no schema needed.
"""

from .annotator import NON_UTF8_PLACEHOLDER, Annotator, AnnotatorOptions, annotate
from .wire import (
    DecodeError,
    FieldTag,
    MalformedTag,
    MalformedValue,
    UnknownWireType,
    WireType,
)

__version__ = "0.1.0"

__all__ = [
    "Annotator",
    "AnnotatorOptions",
    "DecodeError",
    "FieldTag",
    "MalformedTag",
    "MalformedValue",
    "NON_UTF8_PLACEHOLDER",
    "UnknownWireType",
    "WireType",
    "annotate",
]

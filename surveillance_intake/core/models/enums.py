"""
Enumerations shared across the intake models.
"""

from enum import Enum


class SourceFormat(str, Enum):
    """Declared format of a raw submission, inferred from its file extension."""

    DELIMITED_TEXT = "delimited_text"
    STRUCTURED_OBJECT = "structured_object"
    MARKUP_TREE = "markup_tree"
    SEGMENTED_MESSAGE = "segmented_message"


# Extension -> format. Anything else is rejected at submission time.
EXTENSION_FORMATS = {
    ".csv": SourceFormat.DELIMITED_TEXT,
    ".txt": SourceFormat.DELIMITED_TEXT,
    ".json": SourceFormat.STRUCTURED_OBJECT,
    ".xml": SourceFormat.MARKUP_TREE,
    ".hl7": SourceFormat.SEGMENTED_MESSAGE,
    ".hl7v2": SourceFormat.SEGMENTED_MESSAGE,
}


class Category(str, Enum):
    """Coarse subject tag derived from the submission's file name."""

    MALARIA = "malaria"
    COVID = "covid"
    INFLUENZA = "influenza"
    CHOLERA = "cholera"
    UNCATEGORIZED = "uncategorized"


class ColumnType(str, Enum):
    NUMERIC = "numeric"
    DATE = "date"
    CATEGORICAL = "categorical"
    UNKNOWN = "unknown"


class Grade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"

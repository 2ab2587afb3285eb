"""
Format normalizers.

Convert delimited text, JSON, XML and HL7 v2 payloads into the canonical
header + rows table every later stage works on.
"""

from typing import Any

from surveillance_intake.core.errors import FormatError
from surveillance_intake.core.models import CanonicalTable, SourceFormat

from .base_normalizer import BaseNormalizer, unique_headers
from .delimited_normalizer import DelimitedNormalizer
from .markup_normalizer import MarkupNormalizer
from .segmented_normalizer import SegmentedNormalizer
from .structured_normalizer import StructuredNormalizer


class FormatNormalizer:
    """
    Dispatches a payload to the normalizer registered for its declared format.
    """

    NORMALIZER_REGISTRY: dict[SourceFormat, type[BaseNormalizer]] = {
        SourceFormat.DELIMITED_TEXT: DelimitedNormalizer,
        SourceFormat.STRUCTURED_OBJECT: StructuredNormalizer,
        SourceFormat.MARKUP_TREE: MarkupNormalizer,
        SourceFormat.SEGMENTED_MESSAGE: SegmentedNormalizer,
    }

    def __init__(self, parameters: dict[SourceFormat, dict[str, Any]] | None = None):
        """
        Initialize the normalizer set.

        Args:
            parameters: Per-format options, e.g. {DELIMITED_TEXT: {"delimiter": ";"}}
        """
        parameters = parameters or {}
        self.normalizers: dict[SourceFormat, BaseNormalizer] = {
            source_format: normalizer_class(parameters.get(source_format))
            for source_format, normalizer_class in self.NORMALIZER_REGISTRY.items()
        }

    def normalize(self, payload: bytes, declared_format: SourceFormat) -> CanonicalTable:
        """
        Normalize a payload as its declared format.

        Raises:
            FormatError: If the payload cannot be parsed as declared
        """
        normalizer = self.normalizers.get(SourceFormat(declared_format))
        if normalizer is None:
            raise FormatError(str(declared_format), "No normalizer registered for this format")
        return normalizer.normalize(payload)


def normalize(payload: bytes, declared_format: SourceFormat, delimiter: str = ",") -> CanonicalTable:
    """Normalize a payload with default options (and the given delimiter)."""
    parameters = {SourceFormat.DELIMITED_TEXT: {"delimiter": delimiter}}
    return FormatNormalizer(parameters).normalize(payload, declared_format)


__all__ = [
    "BaseNormalizer",
    "DelimitedNormalizer",
    "StructuredNormalizer",
    "MarkupNormalizer",
    "SegmentedNormalizer",
    "FormatNormalizer",
    "normalize",
    "unique_headers",
]

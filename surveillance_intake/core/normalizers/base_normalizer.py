"""
Base normalizer interface for all submission formats.

All normalizers must inherit from BaseNormalizer and implement parse().
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable

from surveillance_intake.core.errors import FormatError
from surveillance_intake.core.models import CanonicalTable, SourceFormat


def unique_headers(names: Iterable[str]) -> list[str]:
    """
    Trim header names and make them unique.

    Blank names become ``column_<n>`` (1-based position); repeats get a
    ``_2``, ``_3``... suffix.

    >>> unique_headers(["id", " ", "id"])
    ['id', 'column_2', 'id_2']
    """
    headers: list[str] = []
    seen: set[str] = set()
    for position, raw in enumerate(names, start=1):
        name = raw.strip() or f"column_{position}"
        if name in seen:
            suffix = 2
            while f"{name}_{suffix}" in seen:
                suffix += 1
            name = f"{name}_{suffix}"
        seen.add(name)
        headers.append(name)
    return headers


class BaseNormalizer(ABC):
    """
    Abstract base class for format normalizers.

    Each normalizer converts one declared format into a CanonicalTable.
    Decoding and the empty-payload rule are shared here so every format
    treats an empty upload as a zero-row, zero-header table.
    """

    def __init__(self, parameters: dict[str, Any] | None = None):
        """
        Initialize normalizer.

        Args:
            parameters: Format-specific options (e.g., delimiter)
        """
        self.parameters = parameters or {}

    @property
    @abstractmethod
    def source_format(self) -> SourceFormat:
        """Return the format this normalizer handles."""
        pass

    @abstractmethod
    def parse(self, text: str) -> CanonicalTable:
        """
        Parse decoded, non-blank text into a canonical table.

        Raises:
            FormatError: If the text is not valid for this format
        """
        pass

    def normalize(self, payload: bytes) -> CanonicalTable:
        """
        Normalize a raw payload.

        Args:
            payload: Raw uploaded bytes

        Returns:
            CanonicalTable (empty when the payload is blank)

        Raises:
            FormatError: If the payload cannot be decoded or parsed
        """
        text = self.decode(payload)
        if not text.strip():
            return CanonicalTable()
        return self.parse(text)

    def decode(self, payload: bytes) -> str:
        """Decode UTF-8, dropping a leading byte-order mark."""
        try:
            return payload.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise self.error(f"Payload is not valid UTF-8: {e}") from e

    def error(self, message: str) -> FormatError:
        return FormatError(self.source_format.value, message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(params={self.parameters})"

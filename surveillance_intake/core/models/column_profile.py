"""
ColumnProfile model describing the inferred type of one column.
"""

from pydantic import BaseModel, Field

from .enums import ColumnType


class ColumnProfile(BaseModel):
    """
    Per-column profile computed from data rows only.

    Attributes:
        name: Column header
        inferred_type: numeric, date, categorical, or unknown (no non-empty values)
        non_empty_count: Cells with a non-blank value
        missing_count: Cells that are blank after trimming
    """

    name: str
    inferred_type: ColumnType
    non_empty_count: int = Field(0, ge=0)
    missing_count: int = Field(0, ge=0)

    class Config:
        frozen = True

"""
CanonicalTable model: the format-independent header + rows form every normalizer produces.
"""

from pydantic import BaseModel, Field, model_validator


class CanonicalTable(BaseModel):
    """
    Normalized tabular content of one submission.

    Every row holds exactly one string cell per header. Produced once by
    the Format Normalizer and immutable afterwards.

    Attributes:
        headers: Ordered, unique column names
        rows: Ordered data rows (header excluded)
        dropped_row_count: Source rows rejected because their width did not match the header
    """

    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)
    dropped_row_count: int = Field(0, ge=0)

    @model_validator(mode="after")
    def check_shape(self):
        """Validate unique headers and that every row matches the header width."""
        if len(set(self.headers)) != len(self.headers):
            raise ValueError(f"headers must be unique, got {self.headers}")

        width = len(self.headers)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"row {index} has {len(row)} cells but there are {width} headers"
                )
        return self

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.headers)

    @property
    def is_empty(self) -> bool:
        return not self.headers and not self.rows

    def column(self, name: str) -> list[str]:
        """Return every cell of the named column, in row order."""
        index = self.headers.index(name)
        return [row[index] for row in self.rows]

    def to_delimited_text(self, delimiter: str = ",") -> str:
        """
        Serialize as delimited text: header line then one line per row,
        every line newline-terminated. An empty table serializes to "".
        """
        if not self.headers:
            return ""
        lines = [delimiter.join(self.headers)]
        lines.extend(delimiter.join(row) for row in self.rows)
        return "\n".join(lines) + "\n"

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "headers": ["district", "week", "cases"],
                "rows": [["Harare", "1", "14"], ["Bulawayo", "1", "9"]],
                "dropped_row_count": 0,
            }
        }


class ProcessedTable(CanonicalTable):
    """
    CanonicalTable after duplicate-row removal and missing-value imputation.

    This is the artifact eligible for downstream consumption.
    """

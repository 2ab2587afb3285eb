"""
DuplicateVerdict model representing the outcome of duplicate detection (ephemeral).
"""

from pydantic import BaseModel, Field, model_validator

from .enums import Category


class DuplicateVerdict(BaseModel):
    """
    Outcome of comparing a submission against previously accepted artifacts.

    Note: DuplicateVerdict is not persisted on its own; it is folded into
    the quality report's issues.

    Attributes:
        is_duplicate: True on a content match or a file name collision
        matched_category: Category whose artifacts were searched
        content_match: A sampled artifact has the same content fingerprint
        name_collision: A stored artifact has exactly the submission's file name
        matched_artifact: Name of the artifact that matched, if any
        candidates_checked: Sampled artifacts that were compared
        candidates_failed: Sampled artifacts that could not be read
    """

    is_duplicate: bool
    matched_category: Category
    content_match: bool = False
    name_collision: bool = False
    matched_artifact: str | None = None
    candidates_checked: int = Field(0, ge=0)
    candidates_failed: int = Field(0, ge=0)

    @model_validator(mode="after")
    def check_duplicate_consistency(self):
        """Validate that is_duplicate agrees with the match flags."""
        if self.is_duplicate != (self.content_match or self.name_collision):
            raise ValueError("is_duplicate must equal content_match or name_collision")
        return self

    @classmethod
    def new(cls, category: Category, checked: int = 0, failed: int = 0) -> "DuplicateVerdict":
        """Verdict for a submission with no match."""
        return cls(
            is_duplicate=False,
            matched_category=category,
            candidates_checked=checked,
            candidates_failed=failed,
        )

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "is_duplicate": True,
                "matched_category": "malaria",
                "content_match": True,
                "name_collision": False,
                "matched_artifact": "submitted-datasets/malaria_1760868000000_3fa2b1c9.csv",
                "candidates_checked": 1,
                "candidates_failed": 0,
            }
        }

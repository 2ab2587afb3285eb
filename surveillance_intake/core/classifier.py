"""
Category classification from submission file names.
"""

from typing import Iterable

from surveillance_intake.core.models import Category

# Checked in order; the first keyword found in the file name wins
DEFAULT_CATEGORY_KEYWORDS: tuple[tuple[str, Category], ...] = (
    ("malaria", Category.MALARIA),
    ("covid", Category.COVID),
    ("influenza", Category.INFLUENZA),
    ("flu", Category.INFLUENZA),
    ("cholera", Category.CHOLERA),
)


class CategoryClassifier:
    """
    Derives a coarse subject category by case-insensitive substring match.

    Keyword order is the tie-break: "malaria_covid_data.csv" resolves to
    whichever of the two is listed first.
    """

    def __init__(self, keywords: Iterable[tuple[str, Category]] | None = None):
        pairs = DEFAULT_CATEGORY_KEYWORDS if keywords is None else keywords
        self.keywords = [(keyword.lower(), Category(category)) for keyword, category in pairs]
        if any(not keyword for keyword, _ in self.keywords):
            raise ValueError("Category keywords must be non-empty")

    def classify(self, file_name: str) -> Category:
        name = file_name.lower()
        for keyword, category in self.keywords:
            if keyword in name:
                return category
        return Category.UNCATEGORIZED


def classify(file_name: str) -> Category:
    """Classify with the default keyword list."""
    return CategoryClassifier().classify(file_name)

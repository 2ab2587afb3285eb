"""
Ingestion settings management.

Loads pipeline settings from a YAML file, applies environment overrides,
and validates the result into an IngestionSettings model.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from surveillance_intake.core.classifier import DEFAULT_CATEGORY_KEYWORDS, CategoryClassifier
from surveillance_intake.core.errors import ConfigError
from surveillance_intake.core.models import Category
from surveillance_intake.utils.validation import validate_delimiter, validate_sample_size

DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024

# Environment variable -> settings field
ENV_OVERRIDES = {
    "INTAKE_DUPLICATE_SAMPLE_SIZE": "duplicate_sample_size",
    "INTAKE_MAX_UPLOAD_BYTES": "max_upload_bytes",
}


class CategoryKeyword(BaseModel):
    """One entry of the ordered keyword list used for category classification."""

    keyword: str = Field(..., min_length=1)
    category: Category


class IngestionSettings(BaseModel):
    """
    Tunable settings for one pipeline instance.

    Attributes:
        delimiter: Field delimiter for delimited-text submissions
        duplicate_sample_size: How many same-category artifacts duplicate detection compares against
        max_upload_bytes: Largest accepted payload
        processed_prefix: Store prefix for processed tables
        report_prefix: Store prefix for quality reports
        category_keywords: Ordered keyword list; the first match wins
    """

    delimiter: str = ","
    duplicate_sample_size: int = 3
    max_upload_bytes: int = Field(DEFAULT_MAX_UPLOAD_BYTES, gt=0)
    processed_prefix: str = "submitted-datasets/"
    report_prefix: str = "quality-reports/"
    category_keywords: list[CategoryKeyword] = Field(
        default_factory=lambda: [
            CategoryKeyword(keyword=keyword, category=category)
            for keyword, category in DEFAULT_CATEGORY_KEYWORDS
        ]
    )

    @field_validator('delimiter')
    @classmethod
    def check_delimiter(cls, v):
        return validate_delimiter(v)

    @field_validator('duplicate_sample_size')
    @classmethod
    def check_sample_size(cls, v):
        return validate_sample_size(v)

    @field_validator('processed_prefix', 'report_prefix')
    @classmethod
    def check_prefix(cls, v):
        """Prefixes are single directory names ending in '/'."""
        if not v or not v.endswith("/") or v.count("/") != 1:
            raise ValueError(f"prefix must be a single directory name ending in '/', got {v!r}")
        return v

    def classifier(self) -> CategoryClassifier:
        return CategoryClassifier((entry.keyword, entry.category) for entry in self.category_keywords)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "delimiter": ",",
                "duplicate_sample_size": 3,
                "max_upload_bytes": DEFAULT_MAX_UPLOAD_BYTES,
                "processed_prefix": "submitted-datasets/",
                "report_prefix": "quality-reports/",
                "category_keywords": [
                    {"keyword": "malaria", "category": "malaria"},
                    {"keyword": "flu", "category": "influenza"},
                ],
            }
        }


class SettingsLoader:
    """
    Loads ingestion settings from YAML configuration files.

    Expected YAML format:
    ```yaml
    ingestion:
      delimiter: ","
      duplicate_sample_size: 3
      max_upload_bytes: 52428800
      processed_prefix: submitted-datasets/
      report_prefix: quality-reports/
      categories:
        - keyword: malaria
          category: malaria
        - keyword: flu
          category: influenza
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the settings loader.

        Args:
            config_path: Path to the YAML configuration file

        Raises:
            FileNotFoundError: If the file does not exist
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Ingestion configuration file not found: {config_path}")

    def load(self, environ: dict[str, str] | None = None) -> IngestionSettings:
        """
        Load, override from the environment and validate.

        Args:
            environ: Environment mapping (defaults to os.environ)

        Returns:
            IngestionSettings

        Raises:
            ConfigError: If the YAML is invalid or a value fails validation
        """
        with open(self.config_path) as f:
            try:
                config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not config or "ingestion" not in config:
            raise ConfigError("Configuration file must contain 'ingestion' section")

        section = config["ingestion"] or {}
        if not isinstance(section, dict):
            raise ConfigError("'ingestion' section must be a mapping")

        values = self._parse_section(section)
        values.update(read_env_overrides(environ))
        return build_settings(values)

    def _parse_section(self, section: dict[str, Any]) -> dict[str, Any]:
        values = {key: value for key, value in section.items() if key != "categories"}

        if "categories" in section:
            categories = section["categories"]
            if not isinstance(categories, list):
                raise ConfigError("'categories' must be a list of {keyword, category} entries")
            for idx, entry in enumerate(categories):
                if not isinstance(entry, dict) or "keyword" not in entry or "category" not in entry:
                    raise ConfigError(f"Category entry {idx} must define 'keyword' and 'category'")
            values["category_keywords"] = categories

        return values


def read_env_overrides(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Collect integer overrides from INTAKE_* environment variables."""
    environ = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    for variable, field_name in ENV_OVERRIDES.items():
        raw = environ.get(variable)
        if raw is None or raw == "":
            continue
        try:
            overrides[field_name] = int(raw)
        except ValueError as e:
            raise ConfigError(f"{variable} must be an integer, got {raw!r}") from e
    return overrides


def build_settings(values: dict[str, Any]) -> IngestionSettings:
    try:
        return IngestionSettings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid ingestion settings: {e}") from e


def load_settings(config_path: str | Path | None = None) -> IngestionSettings:
    """
    Load settings from a YAML file, or defaults plus environment overrides.

    Args:
        config_path: Optional YAML path (defaults to env var INTAKE_CONFIG)
    """
    config_path = config_path or os.getenv("INTAKE_CONFIG")
    if config_path:
        return SettingsLoader(config_path).load()
    return build_settings(read_env_overrides())

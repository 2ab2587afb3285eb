"""
Unit tests for input validation utilities.

Includes property-based testing with hypothesis for artifact names.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from surveillance_intake.utils.validation import (
    ValidationError,
    validate_artifact_name,
    validate_delimiter,
    validate_file_name,
    validate_sample_size,
)


@pytest.mark.unit
class TestValidateFileName:
    """Tests for validate_file_name"""

    def test_valid_name_is_stripped(self):
        assert validate_file_name("  malaria cases.csv ") == "malaria cases.csv"

    @pytest.mark.parametrize("value", [None, "", "  ", "a/b.csv", "a\\b.csv", ".", "..", "x" * 256])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            validate_file_name(value)

    def test_error_names_field(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_file_name("", field_name="upload")

        assert "upload" in str(exc_info.value)


@pytest.mark.unit
class TestValidateArtifactName:
    """Tests for validate_artifact_name"""

    @pytest.mark.parametrize("value", [
        "submitted-datasets/malaria_1760868000000_3fa2b1c9.csv",
        "quality-reports/malaria_1760868000000_3fa2b1c9_report.json",
        "loose.csv",
    ])
    def test_valid(self, value):
        assert validate_artifact_name(value) == value

    @pytest.mark.parametrize("value", ["", "a/b/c", "../x", "a/../b", "/x", "x/", "sp ace.csv", "x" * 513])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            validate_artifact_name(value)

    @given(st.from_regex(r"^[a-z-]{1,20}/[a-z]{1,10}_[0-9]{13}_[0-9a-f]{8}\.csv$", fullmatch=True))
    def test_property_generated_names_valid(self, name):
        """Property test: every name the emitter can generate passes validation"""
        assert validate_artifact_name(name) == name


@pytest.mark.unit
class TestValidateSampleSize:
    """Tests for validate_sample_size"""

    @pytest.mark.parametrize("value", [1, 3, 1000])
    def test_valid(self, value):
        assert validate_sample_size(value) == value

    @pytest.mark.parametrize("value", [0, -5, 1001, 2.5, "3", True, None])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            validate_sample_size(value)


@pytest.mark.unit
class TestValidateDelimiter:
    """Tests for validate_delimiter"""

    @pytest.mark.parametrize("value", [",", ";", "\t", "|"])
    def test_valid(self, value):
        assert validate_delimiter(value) == value

    @pytest.mark.parametrize("value", ["", ",,", "\n", "\r", None])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            validate_delimiter(value)

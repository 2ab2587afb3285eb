"""
Unit tests for content fingerprinting and category classification.
"""

import hashlib

import pytest
from hypothesis import given
from hypothesis import strategies as st

from surveillance_intake.core.classifier import CategoryClassifier, classify
from surveillance_intake.core.fingerprint import fingerprint, serialize_table
from surveillance_intake.core.models import CanonicalTable, Category, SourceFormat
from surveillance_intake.core.normalizers import normalize

cells = st.text(alphabet="abcXYZ0129 -.", max_size=6)


@pytest.mark.unit
class TestFingerprint:
    """Tests for the content fingerprint"""

    def test_matches_sha256_of_serialization(self):
        """Test the fingerprint is SHA-256 over header and rows joined by commas and newlines"""
        table = CanonicalTable(headers=["a", "b"], rows=[["1", "2"], ["3", "4"]])
        expected = hashlib.sha256(b"a,b\n1,2\n3,4").hexdigest()

        assert serialize_table(table) == "a,b\n1,2\n3,4"
        assert fingerprint(table) == expected

    def test_cell_order_matters(self):
        """Test swapping rows changes the fingerprint"""
        first = CanonicalTable(headers=["a"], rows=[["1"], ["2"]])
        second = CanonicalTable(headers=["a"], rows=[["2"], ["1"]])

        assert fingerprint(first) != fingerprint(second)

    def test_whitespace_encoding_does_not_change_fingerprint(self):
        """Test padding and line endings are normalized away before hashing"""
        plain = normalize(b"a,b\n1,2\n", SourceFormat.DELIMITED_TEXT)
        padded = normalize(b"\xef\xbb\xbf a , b \r\n 1 ,2 \r\n\r\n", SourceFormat.DELIMITED_TEXT)

        assert fingerprint(plain) == fingerprint(padded)

    def test_lowercase_hex(self):
        """Test the digest is 64 lowercase hex characters"""
        digest = fingerprint(CanonicalTable())

        assert len(digest) == 64
        assert digest == digest.lower()
        assert digest == hashlib.sha256(b"").hexdigest()

    @given(st.lists(st.lists(cells, min_size=2, max_size=2), max_size=8))
    def test_property_fingerprint_is_deterministic(self, rows):
        """Property test: equal tables always have equal fingerprints"""
        first = CanonicalTable(headers=["x", "y"], rows=rows)
        second = CanonicalTable(headers=["x", "y"], rows=[list(row) for row in rows])

        assert fingerprint(first) == fingerprint(second)
        assert fingerprint(first) == fingerprint(first)


@pytest.mark.unit
class TestCategoryClassifier:
    """Tests for file-name category classification"""

    @pytest.mark.parametrize("file_name,category", [
        ("malaria_cases_2025.csv", Category.MALARIA),
        ("COVID19_Lab.hl7", Category.COVID),
        ("weekly_influenza.json", Category.INFLUENZA),
        ("flu_sentinel.csv", Category.INFLUENZA),
        ("Cholera-outbreak.xml", Category.CHOLERA),
        ("district_totals.csv", Category.UNCATEGORIZED),
    ])
    def test_default_keywords(self, file_name, category):
        """Test case-insensitive substring matching with the default keywords"""
        assert classify(file_name) == category

    def test_first_listed_keyword_wins(self):
        """Test malaria is listed before covid, so it wins"""
        assert classify("malaria_covid_data.csv") == Category.MALARIA

    def test_custom_keyword_order(self):
        """Test a custom keyword list changes the tie-break"""
        classifier = CategoryClassifier([("covid", Category.COVID), ("malaria", Category.MALARIA)])
        assert classifier.classify("malaria_covid_data.csv") == Category.COVID

    def test_custom_keywords_extend_matching(self):
        """Test new keywords can map onto existing categories"""
        classifier = CategoryClassifier([("sars", Category.COVID)])

        assert classifier.classify("SARS_CoV2.csv") == Category.COVID
        assert classifier.classify("malaria.csv") == Category.UNCATEGORIZED

    def test_empty_keyword_rejected(self):
        """Test an empty keyword would match everything and is rejected"""
        with pytest.raises(ValueError):
            CategoryClassifier([("", Category.MALARIA)])

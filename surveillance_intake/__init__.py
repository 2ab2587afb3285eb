"""
Health-surveillance submission ingestion and quality grading.
"""

__version__ = "0.1.0"

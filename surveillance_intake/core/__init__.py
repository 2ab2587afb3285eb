"""
Core intake logic: models, normalizers, fingerprinting, classification and grading.
"""

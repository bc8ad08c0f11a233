# dues/__init__.py
"""Membership dues (cotisation, assurance) assigned per person and year."""

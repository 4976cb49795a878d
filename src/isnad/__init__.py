"""Isnad — narrator identity resolution and reliability grading for hadith chains."""

__version__ = "0.1.0"

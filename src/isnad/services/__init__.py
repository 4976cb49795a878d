"""Isnad services — matching, grading, chain analysis and reference loading."""

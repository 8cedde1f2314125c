"""Utility functions."""

from thesisbot.utils.text import clean_title, pdf_filename, strip_json_fence

__all__ = ["clean_title", "pdf_filename", "strip_json_fence"]

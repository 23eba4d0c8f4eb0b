"""Command-line interface for XML Thinner.

This module provides the ``xml-thinner`` tool for printing the thinned shape
of XML files and reporting structural statistics.
"""

from .main import main

__all__ = ["main"]

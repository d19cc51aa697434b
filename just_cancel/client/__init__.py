"""
External Collaborator Clients

Statement file download and PDF text extraction used by tool calls.
"""

from .extraction import PdfPlumberExtractor, TextExtractor
from .file_client import FetchedFile, StatementFileClient

__all__ = ["FetchedFile", "PdfPlumberExtractor", "StatementFileClient", "TextExtractor"]

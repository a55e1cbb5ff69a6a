"""
Word2PDF conversion service package.

This module provides a FastAPI application that converts uploaded office
documents to PDF through LibreOffice. Endpoints: `/health` and `/convert`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"

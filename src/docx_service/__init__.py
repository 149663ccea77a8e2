"""
DOCX to PDF Conversion Service package.

This module provides a FastAPI application that accepts DOCX uploads,
converts them to PDF and serves the result for download. Build an app with
`docx_service.webapi.create_app` or run the bundled server with
`docx_service.webapi.run`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"

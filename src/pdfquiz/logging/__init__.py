"""Logging configuration for pdfquiz applications."""

from .setup import document_context, setup_logging

__all__ = ["document_context", "setup_logging"]

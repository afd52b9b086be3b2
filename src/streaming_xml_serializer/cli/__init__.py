"""Command-line interface module for Streaming XML Serializer.

This module provides the streaming-xml tool converting JSON documents to XML.
"""

from .main import main

__all__ = ["main"]

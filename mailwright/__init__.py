"""Mailwright - Pug to MJML to email-safe HTML build pipeline.

Renders Pug templates into MJML, compiles MJML into HTML, minifies and
reports the results, and serves them locally with live reload.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Re-export main CLI entry point
from .cli import main

__all__ = ["main"]

"""Cairn: guided content orchestration.

Drives chat-based generation of structured content blocks (with an
auto-continue mode and a module recommendation gate) and a phased site
migration that walks an operator through page-by-page block review.
"""

__version__ = "0.1.0"

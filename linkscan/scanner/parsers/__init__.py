"""Parser package exports."""

from .body_parser import BodyParser, is_html

__all__ = [
    "BodyParser",
    "is_html",
]

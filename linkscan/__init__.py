"""linkscan: recursive broken-link scanner."""

__version__ = "1.0.0"

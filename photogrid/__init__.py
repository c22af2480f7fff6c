"""PhotoGrid: fixed-template photo collages with per-cell pan and zoom."""

__version__ = "1.0.0"

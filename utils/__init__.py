"""Utility package for photo loading and path validation."""

from . import image_loader, validation

__all__ = ["image_loader", "validation"]

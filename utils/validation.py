"""Checks applied to photo paths from the picker and to export targets."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Union
from urllib.parse import urlparse


def _local_path(path: Union[str, Path]) -> Path:
    # One-letter schemes are Windows drive letters, not URLs.
    scheme = urlparse(str(path)).scheme
    if len(scheme) > 1:
        raise ValueError(f"Only local files are supported, got a {scheme}: URL")
    return Path(path).expanduser()


def _suffixes(allowed_exts: Iterable[str]) -> List[str]:
    """Lower-case ``allowed_exts`` with a leading dot, sorted."""
    return sorted({"." + ext.lower().lstrip(".") for ext in allowed_exts})


def validate_image_path(path: Union[str, Path], allowed_exts: Iterable[str]) -> Path:
    """Return the resolved photo file at *path*.

    Raises ``ValueError`` for URLs, missing paths, directories and files
    whose suffix is not in ``allowed_exts``.
    """
    candidate = _local_path(path)
    try:
        resolved = candidate.resolve(strict=True)
    except FileNotFoundError as exc:
        raise ValueError(f"File does not exist: {path}") from exc
    if not resolved.is_file():
        raise ValueError(f"Not a file: {path}")
    if resolved.suffix.lower() not in _suffixes(allowed_exts):
        raise ValueError(f"Unsupported file extension: {resolved.suffix or '(none)'}")
    return resolved


def validate_output_path(path: Union[str, Path], allowed_exts: Iterable[str]) -> Path:
    """Return the resolved export target for *path*.

    A bare file name gets the first allowed suffix. The parent directory must
    already exist.
    """
    suffixes = _suffixes(allowed_exts)
    if not suffixes:
        raise ValueError("No output extensions allowed")
    target = _local_path(path).resolve()
    if not target.suffix:
        target = target.with_name(target.name + suffixes[0])
    if not target.parent.is_dir():
        raise ValueError(f"Directory does not exist: {target.parent}")
    if target.suffix.lower() not in suffixes:
        raise ValueError(f"Unsupported file extension: {target.suffix}")
    return target

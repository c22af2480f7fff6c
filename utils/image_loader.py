from pathlib import Path
from typing import List, Optional, Sequence, Union
from dataclasses import dataclass
import logging
from PIL import Image, ImageOps, UnidentifiedImageError
from concurrent.futures import ThreadPoolExecutor

from photogrid import config
from .validation import validate_image_path

logger = logging.getLogger("photogrid.loader")


@dataclass(slots=True)
class Photo:
    """
    A decoded photo ready for placement.

    Attributes:
        image (Image.Image): Decoded RGB raster, EXIF orientation applied
        source (Path): File the photo was decoded from
    """
    image: Image.Image
    source: Path

    @property
    def natural_width(self) -> int:
        return self.image.width

    @property
    def natural_height(self) -> int:
        return self.image.height


class ImageDecodeError(Exception):
    """Raised when a selected file is not a loadable image.

    ``token`` is set by callers that track load batches.
    """

    def __init__(self, path: Union[str, Path], reason: str, token: Optional[int] = None):
        super().__init__(f"{Path(path).name}: {reason}")
        self.path = Path(path)
        self.reason = reason
        self.token = token


class PhotoLoader:
    """Decodes batches of photos in parallel, all-or-nothing."""

    VALID_EXTENSIONS = {f'.{fmt}' for fmt in config.SUPPORTED_IMAGE_FORMATS}
    MAX_IMAGE_SIZE = config.MAX_IMAGE_DIMENSION

    def __init__(self, max_workers: int = config.DECODE_WORKERS):
        """Initialize the loader."""
        self._thread_pool = ThreadPoolExecutor(max_workers=max_workers)

    def decode(self, image_path: Union[str, Path]) -> Photo:
        """
        Decode a single photo.

        Args:
            image_path: Path to the image file

        Returns:
            Photo: Decoded photo, downscaled to ``MAX_IMAGE_SIZE`` if larger

        Raises:
            ImageDecodeError: If the file is missing, unsupported or corrupt
        """
        try:
            safe_path = validate_image_path(image_path, self.VALID_EXTENSIONS)
        except ValueError as e:
            raise ImageDecodeError(image_path, str(e)) from e

        try:
            with Image.open(safe_path) as img:
                # Let JPEG decoders downscale early for very large inputs
                limit = (self.MAX_IMAGE_SIZE, self.MAX_IMAGE_SIZE)
                if max(img.size) > self.MAX_IMAGE_SIZE:
                    img.draft("RGB", limit)
                img = ImageOps.exif_transpose(img)
                if max(img.size) > self.MAX_IMAGE_SIZE:
                    img.thumbnail(limit, Image.Resampling.LANCZOS)
                result = img.convert("RGB")
                result.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise ImageDecodeError(safe_path, f"not a valid image ({e})") from e

        if result.width <= 0 or result.height <= 0:
            raise ImageDecodeError(safe_path, "image has no pixels")
        logger.debug("Decoded %s (%dx%d)", safe_path.name, result.width, result.height)
        return Photo(image=result, source=safe_path)

    def decode_batch(self, image_paths: Sequence[Union[str, Path]]) -> List[Photo]:
        """
        Decode several photos in parallel.

        Results are collected in input order; the first failure rejects the
        whole batch and cancels the decodes that have not started yet.

        Args:
            image_paths: Paths selected by the user

        Returns:
            List[Photo]: Photos in the same order as ``image_paths``

        Raises:
            ImageDecodeError: If any file cannot be decoded
        """
        futures = [self._thread_pool.submit(self.decode, path) for path in image_paths]
        photos: List[Photo] = []
        for path, future in zip(image_paths, futures):
            try:
                photos.append(future.result())
            except ImageDecodeError as e:
                logger.warning("Failed to decode %s: %s", path, e.reason)
                for pending in futures:
                    pending.cancel()
                raise
        logger.info("Decoded batch of %d photo(s)", len(photos))
        return photos

    def shutdown(self) -> None:
        self._thread_pool.shutdown(wait=False)

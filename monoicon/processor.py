from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
from dataclasses import dataclass
import logging
from concurrent.futures import ThreadPoolExecutor

from PIL import Image, ImageOps, UnidentifiedImageError

from pixelops.validation import (
    validate_image_path,
    validate_output_path,
    validate_raster,
)

from . import config
from .identity import derive_identity
from .service import IconService

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProcessedIcon:
    """
    Outcome of converting one icon file.

    Attributes:
        source (Path): Input file
        is_colored (bool): Whether the source was judged full-colour
        image (Image.Image): The monochrome (or untouched) result
        output (Optional[Path]): Where the result was written, if anywhere
    """
    source: Path
    is_colored: bool
    image: Image.Image
    output: Optional[Path] = None


class IconProcessingError(Exception):
    """Custom exception for icon file processing errors."""
    pass


class IconProcessor:
    """Converts icon files on disk through an :class:`IconService`."""

    VALID_EXTENSIONS = {f".{fmt}" for fmt in config.SUPPORTED_IMAGE_FORMATS}
    OUTPUT_EXTENSIONS = {'.png', '.webp'}

    def __init__(self, service: Optional[IconService] = None, max_workers: int = 4):
        """Initialize the processor."""
        self.service = service if service is not None else IconService()
        self.max_workers = max_workers

    def load_icon(self, image_path: Union[str, Path]) -> Image.Image:
        """
        Load an icon file as a straight-alpha RGBA raster.

        Raises:
            IconProcessingError: If the file is missing, unsupported or empty
        """
        try:
            safe_path = validate_image_path(
                image_path, self.VALID_EXTENSIONS, config.MAX_IMAGE_DIMENSION
            )
            with Image.open(safe_path) as img:
                img = ImageOps.exif_transpose(img)
                rgba = img.convert("RGBA")
            return validate_raster(rgba, config.MAX_IMAGE_DIMENSION)
        except (ValueError, UnidentifiedImageError, OSError) as e:
            raise IconProcessingError(f"Failed to load icon {image_path}: {e}") from e

    def process_icon(
        self,
        image_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None,
        size: Optional[Tuple[int, int]] = None,
    ) -> ProcessedIcon:
        """
        Classify an icon file and convert it when it is coloured.

        Args:
            image_path: Path to the input icon
            output_path: Optional path to save the result
            size: Optional (width, height) to fit the result to

        Returns:
            ProcessedIcon: The classification and resulting image

        Raises:
            IconProcessingError: If processing fails
        """
        source = Path(image_path)
        image = self.load_icon(source)
        identity = derive_identity(str(source.resolve()))
        try:
            colored = self.service.classify(identity, image).is_colored
            result = self.service.synthesize_monochrome(identity, image) if colored else image
            if size:
                key = f"file_{source.resolve()}" if colored else None
                result = self.service.fit(result, size[0], size[1], key)

            saved: Optional[Path] = None
            if output_path:
                saved = validate_output_path(output_path, self.OUTPUT_EXTENSIONS)
                self._save_image(result, saved)
            return ProcessedIcon(source, colored, result, saved)
        except (ValueError, OSError) as e:
            logger.error("Error processing icon %s: %s", image_path, e)
            raise IconProcessingError(f"Failed to process icon: {e}") from e

    def _save_image(self, image: Image.Image, output_path: Path) -> None:
        """Save an icon losslessly; alpha must survive."""
        fmt = output_path.suffix[1:].upper()
        save_params: Dict[str, object] = {'format': fmt}
        if fmt == 'WEBP':
            save_params.update({'lossless': True, 'method': 6})
        elif fmt == 'PNG':
            save_params.update({'optimize': True, 'compress_level': 6})
        image.save(str(output_path), **save_params)
        logger.info("Saved icon to %s", output_path)

    @staticmethod
    def _output_names(image_paths: List[Union[str, Path]]) -> List[str]:
        """One PNG name per input; repeated stems get a numeric suffix."""
        names: List[str] = []
        taken = set()
        for path in image_paths:
            stem = Path(path).stem
            name = f"{stem}.png"
            suffix = 1
            while name.lower() in taken:
                name = f"{stem}_{suffix}.png"
                suffix += 1
            if suffix > 1:
                logger.warning("Output name for %s collides, writing %s", path, name)
            taken.add(name.lower())
            names.append(name)
        return names

    def process_batch(
        self,
        image_paths: List[Union[str, Path]],
        output_dir: Union[str, Path],
        size: Optional[Tuple[int, int]] = None,
    ) -> Dict[str, bool]:
        """
        Convert multiple icons in parallel.

        Args:
            image_paths: List of paths to input icons
            output_dir: Directory to save results (always written as PNG)
            size: Optional target size for every result

        Returns:
            Dict[str, bool]: Dictionary mapping input paths to success status
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        results: Dict[str, bool] = {}
        if not image_paths:
            return results

        targets = self._output_names(image_paths)
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [
                (path, pool.submit(self.process_icon, path, output_dir / name, size))
                for path, name in zip(image_paths, targets)
            ]
            for path, future in futures:
                try:
                    future.result()
                    results[str(path)] = True
                except IconProcessingError as e:
                    logger.error("Failed to process %s: %s", path, e)
                    results[str(path)] = False

        return results


__all__ = ["IconProcessor", "IconProcessingError", "ProcessedIcon"]

"""WebP conversion for generated hero images."""

import logging
from pathlib import Path
from typing import Tuple

from PIL import Image, ImageOps
from pydantic import BaseModel

logger = logging.getLogger(__name__)

QUALITY = 80
MAX_SIZE = (1200, 675)
SOURCE_SUFFIXES = {".jpg", ".jpeg", ".png"}


class ConversionSummary(BaseModel):
    converted: int = 0
    skipped: int = 0
    failed: int = 0
    total: int = 0


def convert_to_webp(
    source: Path,
    destination: Path,
    quality: int = QUALITY,
    max_size: Tuple[int, int] = MAX_SIZE,
) -> int:
    """Cover-crop ``source`` into ``max_size`` (never enlarging) and save as WebP."""
    with Image.open(source) as raw_image:
        image = raw_image.convert("RGB")
    target = (min(max_size[0], image.width), min(max_size[1], image.height))
    if target != image.size:
        image = ImageOps.fit(image, target, Image.Resampling.LANCZOS)
    image.save(destination, "WEBP", quality=quality)
    return destination.stat().st_size


def _is_up_to_date(source: Path, destination: Path) -> bool:
    return destination.exists() and destination.stat().st_mtime > source.stat().st_mtime


def convert_directory(
    images_dir: Path | str,
    quality: int = QUALITY,
    delete_originals: bool = False,
) -> ConversionSummary:
    """
    Convert every JPG/PNG under ``images_dir/<city>/`` to WebP.

    Outputs newer than their source are skipped. Originals are deleted only
    when requested and nothing failed.
    """
    images_dir = Path(images_dir)
    summary = ConversionSummary()
    sources = []

    for city_dir in sorted(p for p in images_dir.iterdir() if p.is_dir()):
        logger.info("[%s]", city_dir.name)
        for source in sorted(city_dir.iterdir()):
            if source.suffix.lower() not in SOURCE_SUFFIXES:
                continue
            sources.append(source)
            summary.total += 1
            destination = source.with_suffix(".webp")

            if _is_up_to_date(source, destination):
                summary.skipped += 1
                continue

            try:
                size = convert_to_webp(source, destination, quality=quality)
            except OSError as e:
                logger.error("  ✗ %s: %s", source.name, e)
                summary.failed += 1
                continue

            original = source.stat().st_size
            logger.info(
                "  ✓ %s → %s (%.0fKB → %.0fKB)",
                source.name,
                destination.name,
                original / 1024,
                size / 1024,
            )
            summary.converted += 1

    logger.info(
        "TOTAL: %d converted | %d skipped | %d failed | %d files",
        summary.converted,
        summary.skipped,
        summary.failed,
        summary.total,
    )

    if delete_originals and summary.failed == 0:
        for source in sources:
            source.unlink()
        logger.info("Deleted %d original files", len(sources))

    return summary

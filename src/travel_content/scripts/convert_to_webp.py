"""WebP Conversion Script

Converts generated hero images (JPG/PNG) under ``public/images/<city>/``
to resized WebP files for the site.

Usage:
    python -m src.travel_content.scripts.convert_to_webp \\
        --images-dir public/images \\
        --quality 80 [--delete-originals]

Exits with code 0 when every image converted, 1 when any failed.
"""

#!/usr/bin/env python
import argparse
import logging
from pathlib import Path

from src.travel_content.images import QUALITY, convert_directory


def main(argv=None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    parser = argparse.ArgumentParser(description="Convert hero images to WebP")
    parser.add_argument(
        "--images-dir",
        type=Path,
        default=Path("public/images"),
        help="Directory containing one sub-directory of images per city",
    )
    parser.add_argument(
        "--quality",
        type=int,
        default=QUALITY,
        help=f"WebP quality (default: {QUALITY})",
    )
    parser.add_argument(
        "--delete-originals",
        action="store_true",
        help="Delete source images after a run with no failures",
    )
    args = parser.parse_args(argv)

    if not args.images_dir.is_dir():
        logging.getLogger(__name__).error("Images directory not found: %s", args.images_dir)
        return 1

    summary = convert_directory(
        args.images_dir,
        quality=args.quality,
        delete_originals=args.delete_originals,
    )
    return 1 if summary.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())

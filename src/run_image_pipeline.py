"""Hero Image Pipeline CLI Entry Point

Provides the command-line interface for generating blog hero images.
Handles argument parsing, logging configuration, provider selection and
the end-to-end run from Markdown posts to saved images.

Usage:
    python -m src.run_image_pipeline                              # auto provider
    python -m src.run_image_pipeline --provider gemini --shard odd
    python -m src.run_image_pipeline --city dubai --limit 20
    python -m src.run_image_pipeline --dry-run

Parallel mode (run both in separate terminals):
    python -m src.run_image_pipeline --provider openai --shard even
    python -m src.run_image_pipeline --provider gemini --shard odd
"""

import argparse
import logging
import time
from pathlib import Path

from src.travel_content.config import (
    ConfigurationError,
    load_settings,
    require_credentials,
    resolve_provider,
)
from src.travel_content.loaders import gather_posts
from src.travel_content.pipeline import SHARDS, run_image_pipeline
from src.travel_content.progress import ProgressStore, progress_path_for
from src.travel_content.providers import create_provider

PROVIDER_LABELS = {"openai": "DALL-E 3", "gemini": "Gemini"}


def configure_logging() -> None:
    """Configure logging with both console and file output.

    Sets up:
      - Root logger at DEBUG level
      - Console handler at INFO level for user-facing messages
      - File handler at DEBUG level for detailed troubleshooting
      - Reduced verbosity for httpx, openai and google_genai loggers
    """
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)
    log_file = log_dir / "image_pipeline.log"

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    for noisy in ("httpx", "openai", "google_genai", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    # Clear existing handlers to avoid duplicates if run multiple times
    logger.handlers.clear()
    logger.addHandler(console_handler)
    logger.addHandler(file_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate hero images for blog posts"
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Regenerate images even when they already exist",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview prompts without calling a provider or writing files",
    )
    parser.add_argument(
        "--provider",
        choices=("openai", "gemini"),
        default=None,
        help="Image provider (default: openai if OPENAI_API_KEY is set, else gemini)",
    )
    parser.add_argument(
        "--shard",
        choices=SHARDS,
        default=None,
        help="Only process even- or odd-indexed posts",
    )
    parser.add_argument(
        "--city",
        default=None,
        help="Only process posts for this city slug",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of posts to process",
    )
    parser.add_argument(
        "--content-dir",
        type=Path,
        default=None,
        help="Markdown content root (overrides CONTENT_DIR)",
    )
    parser.add_argument(
        "--public-dir",
        type=Path,
        default=None,
        help="Public assets root (overrides PUBLIC_DIR)",
    )
    parser.add_argument(
        "--progress-file",
        type=Path,
        default=None,
        help="Progress checkpoint file (overrides PROGRESS_FILE)",
    )
    return parser


def main(argv=None) -> int:
    """
    CLI entrypoint for the hero image pipeline.

    Returns a Unix-style exit code: 0 when the run completes (even with
    failed jobs, which are retried on the next run), 1 on configuration
    errors or unexpected exceptions.
    """
    configure_logging()
    logger = logging.getLogger(__name__)

    args = build_parser().parse_args(argv)

    settings = load_settings()
    content_dir = args.content_dir or settings.content_dir
    public_dir = args.public_dir or settings.public_dir
    progress_file = progress_path_for(args.progress_file or settings.progress_file, args.shard)

    try:
        provider_name = resolve_provider(args.provider, settings)
        label = PROVIDER_LABELS[provider_name]

        logger.info("=== Blog Image Generator [%s] ===", label)
        logger.info("Mode: %s", "DRY RUN" if args.dry_run else "FORCE" if args.force else "Normal (skip existing)")
        if args.shard:
            logger.info("Shard: %s posts only", args.shard)
        if args.city:
            logger.info("City: %s", args.city)
        if args.limit is not None:
            logger.info("Limit: %d", args.limit)
        logger.info("Progress file: %s", progress_file)

        provider = None
        if not args.dry_run:
            require_credentials(provider_name, settings)
            provider = create_provider(provider_name, settings)
            logger.info("Rate limit: %.0fs between calls", provider.delay_seconds)
    except ConfigurationError as e:
        logger.error("ERROR: %s", e)
        return 1

    try:
        start_time = time.time()

        posts = gather_posts(content_dir, city=args.city)
        logger.info("Found %d blog posts", len(posts))

        progress = ProgressStore(progress_file).load()

        summary = run_image_pipeline(
            posts,
            provider,
            progress,
            public_dir=public_dir,
            content_dir=content_dir,
            force=args.force,
            dry_run=args.dry_run,
            shard=args.shard,
            limit=args.limit,
            min_image_bytes=settings.min_image_bytes,
        )

        if not args.dry_run:
            logger.info("=" * 70)
            logger.info("Pipeline completed in %.2fs", time.time() - start_time)
            logger.info("Summary:")
            logger.info("  Succeeded: %d", summary.succeeded)
            logger.info("  Failed:    %d", summary.failed)
            logger.info("  Skipped:   %d", summary.skipped)
            logger.info("  Total:     %d", summary.processed)
            logger.info("=" * 70)

    except Exception as e:
        logger.exception(f"Pipeline failed with an unhandled exception: {e}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

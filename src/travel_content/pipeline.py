"""
Hero Image Generation Pipeline

Generates hero images for blog posts through an image provider, saves them
under the public assets tree, points each post's front matter at its new
image and checkpoints progress after every job.

Features:
- Incremental runs: jobs marked done, or with an image already on disk, are skipped
- Force mode to regenerate everything
- Even/odd sharding so two processes can split the work without coordination
- Fixed per-provider delay between provider calls
- Dry-run prompt preview without provider calls or writes
"""

from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple
import logging
import time

from .frontmatter import FrontMatterError, set_hero_image
from .models import JobOutcome, JobStatus, PipelineSummary, PostMeta
from .progress import ProgressStore
from .prompts import build_prompt
from .providers import ImageProvider


logger = logging.getLogger(__name__)

MIN_IMAGE_BYTES = 10_000
PREVIEW_LIMIT = 10
SHARDS = ("even", "odd")


def select_shard(posts: Sequence[PostMeta], shard: Optional[str]) -> List[PostMeta]:
    """Keep even- or odd-indexed posts; None keeps everything."""
    if shard is None:
        return list(posts)
    if shard not in SHARDS:
        raise ValueError(f"shard must be one of {SHARDS}, got {shard!r}")
    remainder = 0 if shard == "even" else 1
    return [post for idx, post in enumerate(posts) if idx % 2 == remainder]


def eligible_posts(
    posts: Sequence[PostMeta],
    progress: ProgressStore,
    force: bool = False,
) -> List[PostMeta]:
    """Drop jobs already checkpointed as done, unless forced."""
    if force:
        return list(posts)
    return [post for post in posts if not progress.is_done(post.key)]


def preview_prompts(posts: Sequence[PostMeta], limit: int = PREVIEW_LIMIT) -> List[Tuple[str, str]]:
    return [(post.key, build_prompt(post)) for post in posts[:limit]]


def image_paths(post: PostMeta, public_dir: Path) -> Tuple[Path, str]:
    """On-disk image path and the public URL path written to front matter."""
    filename = f"{post.slug}.jpg"
    return (
        public_dir / "images" / post.city_slug / filename,
        f"/images/{post.city_slug}/{filename}",
    )


def _has_existing_image(path: Path, min_bytes: int) -> bool:
    try:
        return path.stat().st_size > min_bytes
    except FileNotFoundError:
        return False


def _update_post(md_path: Path, public_path: str) -> None:
    """Rewrite the post's hero image reference; failures are logged, not raised."""
    try:
        content = md_path.read_text(encoding="utf-8")
        md_path.write_text(set_hero_image(content, public_path), encoding="utf-8")
        logger.info("  ✓ Updated frontmatter: %s", public_path)
    except (OSError, FrontMatterError) as e:
        logger.error("  Frontmatter error for %s: %s", md_path, e)


def process_post(
    post: PostMeta,
    provider: ImageProvider,
    progress: ProgressStore,
    public_dir: Path,
    content_dir: Path,
    force: bool = False,
    min_image_bytes: int = MIN_IMAGE_BYTES,
) -> JobOutcome:
    """
    Run one job through its state machine.

    PENDING -> SKIPPED (image on disk, not forced)
    PENDING -> SAVED -> DONE (front matter update failure is non-fatal)
    PENDING -> FAILED (provider returned nothing)

    The checkpoint is flushed before returning in every case.
    """
    image_path, public_path = image_paths(post, public_dir)

    if not force and _has_existing_image(image_path, min_image_bytes):
        logger.info("  SKIP: image exists")
        progress.mark(post.key, JobStatus.DONE)
        return JobOutcome.SKIPPED

    prompt = build_prompt(post)
    logger.info("  [%s] %s...", provider.name, prompt[:90])

    data = provider.generate(prompt, post.slug)
    if not data:
        logger.error("  FAILED: %s", post.key)
        progress.mark(post.key, JobStatus.FAILED)
        return JobOutcome.FAILED

    image_path.parent.mkdir(parents=True, exist_ok=True)
    image_path.write_bytes(data)
    logger.info("  ✓ Saved %s (%.0f KB)", image_path.name, len(data) / 1024)

    _update_post(content_dir / post.city_slug / f"{post.slug}.md", public_path)

    progress.mark(post.key, JobStatus.DONE)
    return JobOutcome.SUCCEEDED


def run_image_pipeline(
    posts: Sequence[PostMeta],
    provider: Optional[ImageProvider],
    progress: ProgressStore,
    public_dir: Path | str = "public",
    content_dir: Path | str = "src/content/blog",
    force: bool = False,
    dry_run: bool = False,
    shard: Optional[str] = None,
    limit: Optional[int] = None,
    min_image_bytes: int = MIN_IMAGE_BYTES,
    sleep: Callable[[float], None] = time.sleep,
) -> PipelineSummary:
    """
    Run the hero image pipeline over ``posts``.

    Pipeline Steps:
    1. Apply the shard filter
    2. Drop jobs already done (unless force)
    3. Dry run: preview prompts and stop
    4. Process jobs in order, up to ``limit``, pausing between provider calls

    Returns:
        PipelineSummary with succeeded/failed/skipped counts for this run
        and the number of failed jobs recorded in the progress file.

    Raises:
        ValueError: If ``provider`` is None outside a dry run
        OSError: If the image tree cannot be written
    """
    public_dir = Path(public_dir)
    content_dir = Path(content_dir)
    summary = PipelineSummary()

    # ========== STEP 1: SHARD ==========
    selected = select_shard(posts, shard)
    if shard:
        logger.info("After shard filter (%s): %d posts", shard, len(selected))

    # ========== STEP 2: FILTER DONE JOBS ==========
    to_process = eligible_posts(selected, progress, force)
    summary.eligible = len(to_process)
    logger.info(
        "To process: %d (%d already done)",
        len(to_process),
        len(selected) - len(to_process),
    )

    # ========== STEP 3: DRY RUN ==========
    if dry_run:
        summary.previews = preview_prompts(to_process)
        for idx, (key, prompt) in enumerate(summary.previews, start=1):
            logger.info("[%d] %s", idx, key)
            logger.info("  %s...", prompt[:120])
        if len(to_process) > PREVIEW_LIMIT:
            logger.info("... and %d more", len(to_process) - PREVIEW_LIMIT)
        summary.total_failed = progress.failed_count()
        return summary

    if provider is None:
        raise ValueError("An image provider is required unless dry_run is set")

    # ========== STEP 4: GENERATE ==========
    if limit is not None:
        to_process = to_process[:max(limit, 0)]
    total = len(to_process)
    called_provider = False

    for idx, post in enumerate(to_process, start=1):
        logger.info("[%d/%d] %s", idx, total, post.key)

        # Pause only before a provider call that follows an earlier one
        will_call = force or not _has_existing_image(image_paths(post, public_dir)[0], min_image_bytes)
        if will_call and called_provider and provider.delay_seconds:
            logger.info("  Waiting %.0fs...", provider.delay_seconds)
            sleep(provider.delay_seconds)

        outcome = process_post(
            post,
            provider,
            progress,
            public_dir=public_dir,
            content_dir=content_dir,
            force=force,
            min_image_bytes=min_image_bytes,
        )
        summary.processed += 1
        if outcome == JobOutcome.SUCCEEDED:
            summary.succeeded += 1
        elif outcome == JobOutcome.FAILED:
            summary.failed += 1
        else:
            summary.skipped += 1

        if outcome != JobOutcome.SKIPPED:
            called_provider = True

    summary.total_failed = progress.failed_count()

    logger.info("=" * 50)
    logger.info(
        "DONE [%s]: %d succeeded, %d failed, %d skipped, %d total",
        provider.name,
        summary.succeeded,
        summary.failed,
        summary.skipped,
        summary.processed,
    )
    if summary.total_failed:
        logger.info("%d total failed: run again to retry", summary.total_failed)

    return summary

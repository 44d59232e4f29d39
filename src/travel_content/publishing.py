"""Editorial Publishing Module

Saves an edited article back into the content tree and pushes it to the
site repository. The git step is best-effort: any failure is reported in
the returned GitResult and never raised to the caller.
"""

import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Tuple

from .frontmatter import render_document
from .models import GitResult

logger = logging.getLogger(__name__)


def save_article(
    content_dir: str | Path,
    city: str,
    slug: str,
    fields: Dict[str, Any],
    body: str,
) -> Path:
    """Write ``content_dir/city/slug.md`` and return its path."""
    path = Path(content_dir) / city / f"{slug}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_document(fields, body), encoding="utf-8")
    logger.info("✓ Saved article %s/%s", city, slug)
    return path


def _git(args: List[str], repo_root: Path) -> str:
    completed = subprocess.run(
        ["git", *args],
        cwd=repo_root,
        check=True,
        capture_output=True,
        text=True,
    )
    return completed.stdout.strip()


def git_commit_and_push(
    relative_path: str | Path,
    message: str,
    repo_root: str | Path,
    remote: str = "origin",
    branch: str = "main",
) -> GitResult:
    """Stage one file, commit it and push; failures come back as pushed=False."""
    repo_root = Path(repo_root)
    try:
        _git(["add", str(relative_path)], repo_root)
        staged = _git(["diff", "--cached", "--name-only"], repo_root)
        if not staged:
            return GitResult(pushed=False, error="No changes detected")

        _git(["commit", "-m", message], repo_root)
        commit_hash = _git(["rev-parse", "--short", "HEAD"], repo_root)
        _git(["push", remote, branch], repo_root)
    except subprocess.CalledProcessError as e:
        error = (e.stderr or "").strip() or str(e)
        logger.warning("Git operation failed: %s", error)
        return GitResult(pushed=False, error=error)
    except OSError as e:
        logger.warning("Git unavailable: %s", e)
        return GitResult(pushed=False, error=str(e) or "Git operation failed")

    logger.info("✓ Pushed %s (%s)", relative_path, commit_hash)
    return GitResult(pushed=True, commit_hash=commit_hash)


def publish_article(
    content_dir: str | Path,
    repo_root: str | Path,
    city: str,
    slug: str,
    fields: Dict[str, Any],
    body: str,
) -> Tuple[Path, GitResult]:
    """Save the article, then commit and push it."""
    path = save_article(content_dir, city, slug, fields, body)
    try:
        relative = path.resolve().relative_to(Path(repo_root).resolve())
    except ValueError:
        return path, GitResult(pushed=False, error=f"{path} is outside {repo_root}")
    result = git_commit_and_push(relative, f"content: update {city}/{slug}", repo_root)
    return path, result

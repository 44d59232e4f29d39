"""Data Loader Module

Provides utilities to load the article collection exported by the site
build and to gather image pipeline jobs from the Markdown content tree.
Supports flexible container structures for the JSON export (flat array,
'posts' key, 'articles' key).
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .frontmatter import parse_frontmatter
from .models import Article, PostMeta
from .prompts import CITY_CONFIG

logger = logging.getLogger(__name__)


def load_articles(path: str | Path) -> List[Article]:
    """Load the article collection from a JSON file.

    Supports flexible input formats:
      - Direct list of articles: [{...}, {...}, ...]
      - Wrapped in 'posts' key: {"posts": [...]}
      - Wrapped in 'articles' key: {"articles": [...]}

    Entries that fail validation are skipped, and only the first article
    for a given slug is kept.

    Raises:
        FileNotFoundError: If file does not exist
        json.JSONDecodeError: If file is not valid JSON
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("posts") or data.get("articles") or []
    if not isinstance(data, list):
        logger.warning("Unexpected collection format in %s; treating as empty", path)
        return []

    articles: List[Article] = []
    seen_slugs: set[str] = set()
    for idx, raw in enumerate(data):
        try:
            article = Article.model_validate(raw)
        except ValidationError as e:
            logger.warning("Skipping malformed article at index %d: %s", idx, e)
            continue
        if article.slug in seen_slugs:
            logger.warning("Duplicate slug detected: %s. Keeping first occurrence.", article.slug)
            continue
        seen_slugs.add(article.slug)
        articles.append(article)

    logger.info("✓ Loaded %d articles from %s", len(articles), path)
    return articles


def _post_from_frontmatter(
    fm: Dict[str, Any],
    city_slug: str,
    slug: str,
    city_config: Dict[str, str],
) -> PostMeta:
    def text(key: str, default: str) -> str:
        value = fm.get(key)
        if isinstance(value, str) and value:
            return value
        return default

    return PostMeta(
        title=text("title", slug),
        description=text("description", ""),
        city=text("city", city_config["name"]),
        city_slug=city_slug,
        country=text("country", city_config["country"]),
        category=text("category", "Travel"),
        topic=text("topic", slug),
        slug=slug,
    )


def gather_posts(
    content_dir: str | Path,
    city: Optional[str] = None,
    cities: Optional[Dict[str, Dict[str, str]]] = None,
) -> List[PostMeta]:
    """
    Collect image jobs from ``content_dir/<citySlug>/<slug>.md``.

    City directories and files are visited in sorted order so shard
    assignment is stable between runs. Unknown city directories are
    skipped with a warning.

    Raises:
        FileNotFoundError: If content_dir does not exist
    """
    content_dir = Path(content_dir)
    cities = cities if cities is not None else CITY_CONFIG

    if not content_dir.is_dir():
        raise FileNotFoundError(f"Content directory not found: {content_dir}")

    posts: List[PostMeta] = []
    for city_path in sorted(content_dir.iterdir()):
        city_slug = city_path.name
        if city and city_slug != city:
            continue
        if not city_path.is_dir():
            continue
        city_config = cities.get(city_slug)
        if city_config is None:
            logger.warning("Unknown city: %s, skipping", city_slug)
            continue

        for md_path in sorted(city_path.glob("*.md")):
            content = md_path.read_text(encoding="utf-8")
            fm = parse_frontmatter(content)
            posts.append(_post_from_frontmatter(fm, city_slug, md_path.stem, city_config))

    logger.debug("Gathered %d posts from %s", len(posts), content_dir)
    return posts

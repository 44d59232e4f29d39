"""Data Models Module

Defines Pydantic models shared by the article search engine and the hero
image pipeline: the read-only article collection, ephemeral search state,
derived result pages, image-generation job units and run summaries.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Article(BaseModel):
    """A published blog article as exported by the site build.

    Accepts both the site's camelCase JSON keys (``pubDate``, ``heroImage``,
    ``readingTime``) and snake_case field names.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str = ""
    slug: str
    city: str
    category: str
    pub_date: datetime = Field(alias="pubDate")
    hero_image: Optional[str] = Field(default=None, alias="heroImage")
    reading_time: int = Field(default=0, alias="readingTime")
    tags: List[str] = []
    keywords: List[str] = []
    featured: Optional[bool] = None

    @field_validator("pub_date", mode="before")
    @classmethod
    def _parse_pub_date(cls, value):
        if isinstance(value, str):
            text = value.strip()
            if len(text) == 10:
                value = datetime.combine(date.fromisoformat(text), datetime.min.time())
            else:
                value = datetime.fromisoformat(text.replace("Z", "+00:00"))
        elif isinstance(value, date) and not isinstance(value, datetime):
            value = datetime.combine(value, datetime.min.time())
        if isinstance(value, datetime) and value.tzinfo is None:
            # Naive dates are treated as UTC so the collection sorts consistently
            value = value.replace(tzinfo=timezone.utc)
        return value


class SearchQuery(BaseModel):
    """Ephemeral UI state for the blog listing."""

    free_text: str = ""
    city: str = ""
    category: str = ""
    page: int = 1


class SearchMatch(BaseModel):
    """A fuzzy match; ``score`` is in [0, 1] and lower is better."""

    item: Article
    score: float


class ResultPage(BaseModel):
    """One page of derived results for a query."""

    items: List[Article]
    page: int
    total_pages: int
    total_items: int

    @property
    def is_empty(self) -> bool:
        return self.total_items == 0


class PostMeta(BaseModel):
    """Image pipeline job unit parsed from a post's front matter."""

    title: str
    description: str = ""
    city: str
    city_slug: str
    country: str
    category: str = "Travel"
    topic: str
    slug: str

    @property
    def key(self) -> str:
        return f"{self.city_slug}/{self.slug}"


class JobStatus(str, Enum):
    """Checkpointed state of a job in the progress file."""

    DONE = "done"
    FAILED = "failed"


class JobOutcome(str, Enum):
    """What happened to a job during the current run."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class PipelineSummary(BaseModel):
    """Final tally for one image pipeline run."""

    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    processed: int = 0
    eligible: int = 0
    total_failed: int = 0
    previews: List[Tuple[str, str]] = []


class GitResult(BaseModel):
    """Best-effort outcome of a commit-and-push."""

    pushed: bool
    commit_hash: Optional[str] = None
    error: Optional[str] = None

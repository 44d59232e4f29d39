"""Front Matter Module

Structured parse and re-serialization of the ``---`` delimited metadata
block at the top of a Markdown post.

Key responsibilities:
  - Split the block into ordered entries that keep their raw lines
  - Decode single-line, block-scalar and list values
  - Replace a single field in place while every other entry and the
    document body are reproduced byte-for-byte
"""

import re
from typing import Any, Dict, List, Optional

import logging

logger = logging.getLogger(__name__)

# Leading metadata block; the body starts right after the closing delimiter
FRONT_MATTER_RE = re.compile(r"\A---(\r?\n)(.*?)\r?\n---(?=\r?\n|\Z)", re.DOTALL)
KEY_RE = re.compile(r"^(\w[\w-]*):\s*(.*)$")
BLOCK_SCALAR_MARKERS = {">", ">-", "|", "|-"}
QUOTES_RE = re.compile(r"^['\"]|['\"]$")

HERO_IMAGE_KEY = "heroImage"


class FrontMatterError(ValueError):
    """Raised when a document has no parseable front matter block."""


class FrontMatterEntry:
    """A single ``key: value`` entry plus its continuation lines."""

    def __init__(self, key: Optional[str], lines: List[str]):
        self.key = key
        self.lines = lines

    def __repr__(self) -> str:
        return f"FrontMatterEntry(key={self.key!r}, lines={self.lines!r})"


def _unquote(value: str) -> str:
    return QUOTES_RE.sub("", value)


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _format_value(key: str, value: Any) -> List[str]:
    """Serialize a value to front matter lines."""
    if isinstance(value, bool):
        return [f"{key}: {'true' if value else 'false'}"]
    if isinstance(value, (int, float)):
        return [f"{key}: {value}"]
    if isinstance(value, (list, tuple)):
        if not value:
            return [f"{key}: []"]
        return [f"{key}:"] + [f"  - {_quote(str(item))}" for item in value]
    return [f"{key}: {_quote(str(value))}"]


class FrontMatter:
    """Ordered, lossless view of a document's front matter block."""

    def __init__(self, entries: List[FrontMatterEntry], body: str, newline: str = "\n"):
        self.entries = entries
        self.body = body
        self.newline = newline

    @classmethod
    def parse(cls, text: str) -> "FrontMatter":
        match = FRONT_MATTER_RE.match(text)
        if not match:
            raise FrontMatterError("document has no front matter block")

        newline = match.group(1)
        entries: List[FrontMatterEntry] = []
        for line in match.group(2).split(newline):
            kv = KEY_RE.match(line)
            if kv:
                entries.append(FrontMatterEntry(kv.group(1), [line]))
            elif entries:
                entries[-1].lines.append(line)
            else:
                # stray text before the first key, kept verbatim
                entries.append(FrontMatterEntry(None, [line]))

        return cls(entries, text[match.end():], newline)

    def keys(self) -> List[str]:
        return [e.key for e in self.entries if e.key is not None]

    def _find(self, key: str) -> Optional[FrontMatterEntry]:
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    def get(self, key: str, default: Any = None) -> Any:
        """
        Decode the value of ``key``.

        - ``key: value`` / ``key: "value"`` → string without surrounding quotes
        - ``key: >-`` followed by two-space indented lines → lines joined by spaces
        - ``key:`` followed by ``- item`` lines → list of strings
        """
        entry = self._find(key)
        if entry is None:
            return default

        kv = KEY_RE.match(entry.lines[0])
        value = kv.group(2).strip() if kv else ""
        continuation = entry.lines[1:]

        if value in BLOCK_SCALAR_MARKERS:
            block = [line[2:] if line.startswith("  ") else line for line in continuation]
            return " ".join(block).strip()

        if not value:
            items = [
                line.strip()[1:].strip()
                for line in continuation
                if line.strip().startswith("-")
            ]
            if items:
                return [_unquote(item) for item in items]
            return ""

        if value.startswith("[") and value.endswith("]"):
            inner = value[1:-1].strip()
            if not inner:
                return []
            return [_unquote(part.strip()) for part in inner.split(",")]

        return _unquote(value)

    def set(self, key: str, value: Any) -> None:
        """Replace ``key`` in place, or append it when missing."""
        lines = _format_value(key, value)
        entry = self._find(key)
        if entry is None:
            self.entries.append(FrontMatterEntry(key, lines))
            return

        # Blank lines trailing a block scalar separate it from the next key
        trailing_blank = 0
        for line in reversed(entry.lines[1:]):
            if line.strip():
                break
            trailing_blank += 1
        entry.lines = lines + [""] * trailing_blank

    def to_dict(self) -> Dict[str, Any]:
        return {key: self.get(key) for key in self.keys()}

    def render(self) -> str:
        # written back with the line ending the document was read with
        nl = self.newline
        block = nl.join(line for entry in self.entries for line in entry.lines)
        return f"---{nl}{block}{nl}---{self.body}"


def parse_frontmatter(text: str) -> Dict[str, Any]:
    """Return the decoded front matter fields, or {} when the block is missing."""
    try:
        return FrontMatter.parse(text).to_dict()
    except FrontMatterError:
        return {}


def set_hero_image(text: str, image_path: str) -> str:
    """Point the document's hero image at ``image_path``."""
    fm = FrontMatter.parse(text)
    fm.set(HERO_IMAGE_KEY, image_path)
    return fm.render()


def render_document(fields: Dict[str, Any], body: str) -> str:
    """Build a new Markdown document from ordered fields and a body."""
    entries = [FrontMatterEntry(key, _format_value(key, value)) for key, value in fields.items()]
    if not body.startswith("\n"):
        body = "\n\n" + body
    return FrontMatter(entries, body).render()

# tests/test_publishing.py

import subprocess
from pathlib import Path

from src.travel_content import publishing
from src.travel_content.frontmatter import parse_frontmatter


class FakeGit:
    """
    Stand-in for subprocess.run that records git invocations and returns
    scripted stdout per sub-command, or raises CalledProcessError.
    """

    def __init__(self, outputs=None, fail_on=None, stderr="fatal: boom"):
        self.outputs = outputs or {}
        self.fail_on = fail_on
        self.stderr = stderr
        self.calls = []

    def __call__(self, args, cwd=None, check=False, capture_output=False, text=False):
        self.calls.append(args)
        sub = args[1]
        if sub == self.fail_on:
            raise subprocess.CalledProcessError(1, args, output="", stderr=self.stderr)
        return subprocess.CompletedProcess(args, 0, stdout=self.outputs.get(sub, ""), stderr="")


def test_save_article_writes_front_matter_and_body(tmp_path: Path):
    path = publishing.save_article(
        tmp_path,
        "paris",
        "louvre",
        {"title": "Louvre Guide", "city": "Paris"},
        "# Louvre\n",
    )

    assert path == tmp_path / "paris" / "louvre.md"
    content = path.read_text(encoding="utf-8")
    assert parse_frontmatter(content) == {"title": "Louvre Guide", "city": "Paris"}
    assert content.endswith("# Louvre\n")


def test_commit_and_push_success(tmp_path: Path, monkeypatch):
    fake = FakeGit(outputs={"diff": "src/content/blog/paris/louvre.md\n", "rev-parse": "abc1234\n"})
    monkeypatch.setattr(publishing.subprocess, "run", fake)

    result = publishing.git_commit_and_push("src/content/blog/paris/louvre.md", "update louvre", tmp_path)

    assert result.pushed is True
    assert result.commit_hash == "abc1234"
    assert result.error is None
    assert [c[1] for c in fake.calls] == ["add", "diff", "commit", "rev-parse", "push"]
    assert fake.calls[2] == ["git", "commit", "-m", "update louvre"]
    assert fake.calls[-1] == ["git", "push", "origin", "main"]


def test_commit_and_push_no_changes(tmp_path: Path, monkeypatch):
    fake = FakeGit(outputs={"diff": ""})
    monkeypatch.setattr(publishing.subprocess, "run", fake)

    result = publishing.git_commit_and_push("a.md", "msg", tmp_path)

    assert result.pushed is False
    assert result.error == "No changes detected"
    assert [c[1] for c in fake.calls] == ["add", "diff"]


def test_commit_and_push_failure_is_reported_not_raised(tmp_path: Path, monkeypatch):
    fake = FakeGit(outputs={"diff": "a.md"}, fail_on="push", stderr="rejected: non-fast-forward")
    monkeypatch.setattr(publishing.subprocess, "run", fake)

    result = publishing.git_commit_and_push("a.md", "msg", tmp_path)

    assert result.pushed is False
    assert result.error == "rejected: non-fast-forward"


def test_commit_and_push_without_git_binary(tmp_path: Path, monkeypatch):
    def missing(*args, **kwargs):
        raise FileNotFoundError("git")

    monkeypatch.setattr(publishing.subprocess, "run", missing)

    result = publishing.git_commit_and_push("a.md", "msg", tmp_path)

    assert result.pushed is False
    assert result.error


def test_publish_article_uses_repo_relative_path(tmp_path: Path, monkeypatch):
    fake = FakeGit(outputs={"diff": "x", "rev-parse": "def5678"})
    monkeypatch.setattr(publishing.subprocess, "run", fake)
    content_dir = tmp_path / "blog" / "src" / "content" / "blog"

    path, result = publishing.publish_article(
        content_dir, tmp_path, "rome", "pasta", {"title": "Pasta"}, "Body\n"
    )

    assert path.exists()
    assert result.pushed
    assert fake.calls[0] == ["git", "add", str(Path("blog/src/content/blog/rome/pasta.md"))]
    assert fake.calls[2] == ["git", "commit", "-m", "content: update rome/pasta"]

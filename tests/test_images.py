# tests/test_images.py

import os
from pathlib import Path

from PIL import Image

from src.travel_content.images import MAX_SIZE, convert_directory, convert_to_webp
from src.travel_content.scripts import convert_to_webp as convert_script


def make_jpg(path: Path, size=(1792, 1024), color=(200, 120, 40)):
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path, "JPEG")
    return path


def test_convert_to_webp_cover_crops_to_max_size(tmp_path: Path):
    source = make_jpg(tmp_path / "hero.jpg")
    dest = tmp_path / "hero.webp"

    size = convert_to_webp(source, dest)

    assert size > 0
    with Image.open(dest) as img:
        assert img.format == "WEBP"
        assert img.size == MAX_SIZE


def test_convert_to_webp_never_enlarges(tmp_path: Path):
    source = make_jpg(tmp_path / "small.jpg", size=(400, 300))
    dest = tmp_path / "small.webp"

    convert_to_webp(source, dest)

    with Image.open(dest) as img:
        assert img.size == (400, 300)


def test_convert_directory_counts_and_skips_up_to_date(tmp_path: Path):
    images = tmp_path / "images"
    make_jpg(images / "dubai" / "a.jpg")
    make_jpg(images / "paris" / "b.jpg")
    (images / "paris" / "notes.txt").write_text("ignore me", encoding="utf-8")

    first = convert_directory(images)
    assert (first.converted, first.skipped, first.failed, first.total) == (2, 0, 0, 2)
    assert (images / "dubai" / "a.webp").exists()

    # make sure outputs are strictly newer than sources
    for src in images.rglob("*.jpg"):
        os.utime(src, (1, 1))

    second = convert_directory(images)
    assert (second.converted, second.skipped) == (0, 2)


def test_convert_directory_reports_failures_and_keeps_originals(tmp_path: Path):
    images = tmp_path / "images"
    make_jpg(images / "rome" / "good.jpg")
    bad = images / "rome" / "broken.jpg"
    bad.write_bytes(b"not an image")

    summary = convert_directory(images, delete_originals=True)

    assert summary.failed == 1
    assert summary.converted == 1
    assert bad.exists()
    assert (images / "rome" / "good.jpg").exists()


def test_convert_directory_deletes_originals_when_clean(tmp_path: Path):
    images = tmp_path / "images"
    make_jpg(images / "tokyo" / "ramen.jpg")

    summary = convert_directory(images, delete_originals=True)

    assert summary.failed == 0
    assert not (images / "tokyo" / "ramen.jpg").exists()
    assert (images / "tokyo" / "ramen.webp").exists()


def test_script_exit_codes(tmp_path: Path):
    assert convert_script.main(["--images-dir", str(tmp_path / "missing")]) == 1

    images = tmp_path / "images"
    make_jpg(images / "rome" / "a.jpg")
    assert convert_script.main(["--images-dir", str(images)]) == 0

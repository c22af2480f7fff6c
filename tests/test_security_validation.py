import pytest

from utils.validation import validate_image_path, validate_output_path
from utils.image_loader import PhotoLoader


def test_validate_image_path_rejects_urls(tmp_path):
    with pytest.raises(ValueError):
        validate_image_path("http://example.com/a.png", PhotoLoader.VALID_EXTENSIONS)


def test_validate_image_path_rejects_bad_extension(tmp_path):
    f = tmp_path / "evil.txt"
    f.write_text("not an image")
    with pytest.raises(ValueError):
        validate_image_path(f, PhotoLoader.VALID_EXTENSIONS)


def test_validate_image_path_rejects_directories(tmp_path):
    d = tmp_path / "folder.png"
    d.mkdir()
    with pytest.raises(ValueError):
        validate_image_path(d, PhotoLoader.VALID_EXTENSIONS)


def test_validate_image_path_accepts_bare_extensions(tmp_path):
    f = tmp_path / "photo.JPG"
    f.write_bytes(b"")
    assert validate_image_path(f, ["jpg"]) == f.resolve()


def test_validate_output_path_checks_directory(tmp_path):
    bad_dir = tmp_path / "missing" / "out.png"
    with pytest.raises(ValueError):
        validate_output_path(bad_dir, {".png"})


def test_validate_output_path_appends_extension(tmp_path):
    assert validate_output_path(tmp_path / "collage", {".png"}).name == "collage.png"


def test_validate_output_path_rejects_other_extension(tmp_path):
    with pytest.raises(ValueError):
        validate_output_path(tmp_path / "collage.jpg", {".png"})


def test_validate_output_path_rejects_urls():
    with pytest.raises(ValueError):
        validate_output_path("https://example.com/collage.png", {".png"})


def test_windows_drive_letter_is_not_a_url(tmp_path):
    # urlparse reports "c" as the scheme of C:/...; it must not be rejected as a URL
    with pytest.raises(ValueError, match="does not exist"):
        validate_image_path("C:/missing/photo.png", {".png"})

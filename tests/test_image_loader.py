import threading
from pathlib import Path

import pytest
from PIL import Image

from utils.image_loader import ImageDecodeError, Photo, PhotoLoader
from photogrid import config


def create_temp_image(tmp_path: Path, name="img.png", size=(10, 10), color="red") -> Path:
    img = Image.new("RGB", size, color=color)
    path = tmp_path / name
    img.save(path)
    return path


@pytest.fixture
def loader():
    proc = PhotoLoader(max_workers=2)
    yield proc
    proc.shutdown()


def test_decode_reports_natural_size(tmp_path, loader):
    path = create_temp_image(tmp_path, size=(30, 20))
    photo = loader.decode(path)
    assert (photo.natural_width, photo.natural_height) == (30, 20)
    assert photo.image.mode == "RGB"
    assert photo.source == path.resolve()


def test_decode_batch_keeps_input_order(tmp_path, loader):
    paths = [
        create_temp_image(tmp_path, name=f"img{i}.png", size=(10 + i, 10))
        for i in range(5)
    ]
    photos = loader.decode_batch(paths)
    assert [p.natural_width for p in photos] == [10, 11, 12, 13, 14]


def test_batch_is_all_or_nothing(tmp_path, loader):
    good = create_temp_image(tmp_path, name="good.png")
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"definitely not a png")
    with pytest.raises(ImageDecodeError) as info:
        loader.decode_batch([good, bad, good])
    assert info.value.path.name == "bad.png"


def test_missing_file_is_decode_error(tmp_path, loader):
    with pytest.raises(ImageDecodeError):
        loader.decode(tmp_path / "missing.png")


def test_unsupported_extension_is_decode_error(tmp_path, loader):
    f = tmp_path / "notes.txt"
    f.write_text("hello")
    with pytest.raises(ImageDecodeError):
        loader.decode(f)


def test_large_images_are_downscaled(tmp_path, loader, monkeypatch):
    monkeypatch.setattr(PhotoLoader, "MAX_IMAGE_SIZE", 50)
    path = create_temp_image(tmp_path, size=(200, 100))
    photo = loader.decode(path)
    assert max(photo.natural_width, photo.natural_height) == 50
    assert photo.natural_width == 2 * photo.natural_height


def test_valid_extensions_follow_config():
    assert PhotoLoader.VALID_EXTENSIONS == {f".{fmt}" for fmt in config.SUPPORTED_IMAGE_FORMATS}


def test_empty_batch_returns_empty_list(loader):
    assert loader.decode_batch([]) == []


def test_decompression_bomb_is_decode_error(tmp_path, loader, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    path = create_temp_image(tmp_path, size=(200, 200))
    with pytest.raises(ImageDecodeError) as info:
        loader.decode_batch([path])
    assert info.value.path == path.resolve()


def test_failure_cancels_decodes_not_yet_started(monkeypatch):
    single = PhotoLoader(max_workers=1)
    release = threading.Event()
    decoded = []

    def fake_decode(path):
        if path == "bad.png":
            raise ImageDecodeError(path, "not a valid image")
        release.wait(timeout=5)
        decoded.append(path)
        return Photo(image=Image.new("RGB", (1, 1)), source=Path(path))

    monkeypatch.setattr(single, "decode", fake_decode)
    try:
        with pytest.raises(ImageDecodeError):
            single.decode_batch(["bad.png", "a.png", "b.png", "c.png"])
    finally:
        release.set()
        single._thread_pool.shutdown(wait=True)
    assert "b.png" not in decoded
    assert "c.png" not in decoded

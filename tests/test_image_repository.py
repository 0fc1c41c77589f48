import numpy as np
import pytest

from conftest import png_bytes
from imagelab.errors import InvalidInput
from imagelab.repositories.image_repository import ImageRepository


@pytest.fixture
def repo() -> ImageRepository:
    return ImageRepository()


@pytest.mark.parametrize("channels", [1, 3, 4])
def test_save_then_load_keeps_pixels(repo, make_image, tmp_path, channels):
    img = make_image(channels=channels)
    path = repo.save(img, tmp_path / f"img_{channels}.png")

    loaded = repo.load(path)

    assert loaded.channels == channels
    assert np.array_equal(loaded.pixels, img.pixels)


def test_decode_reads_rgb_order(repo):
    pixels = np.zeros((2, 2, 3), dtype=np.uint8)
    pixels[:, :, 0] = 255  # pure red
    decoded = repo.decode(png_bytes(pixels))
    assert np.array_equal(decoded.pixels, pixels)


def test_missing_file(repo, tmp_path):
    with pytest.raises(InvalidInput):
        repo.load(tmp_path / "nope.png")


def test_unsupported_extension(repo, tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    with pytest.raises(InvalidInput):
        repo.load(path)


@pytest.mark.parametrize("payload", [b"", b"definitely not an image"])
def test_undecodable_payload(repo, payload):
    with pytest.raises(InvalidInput):
        repo.decode(payload)

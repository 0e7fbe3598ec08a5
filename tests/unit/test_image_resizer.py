import pytest
from PIL import Image

from image_optimizer.domain.exceptions import NotFoundError
from image_optimizer.infrastructure.storage.image_resizer import ImageResizer


def test_target_size_keeps_aspect_ratio():
    assert ImageResizer.target_size(3200, 2133, 1920) == (1920, 1279)
    assert ImageResizer.target_size(800, 600, 1920) == (800, 600)


def test_scale_down(image_factory):
    path = image_factory("wide.jpg", size=(640, 320))

    result = ImageResizer().scale_to_max_width(path, 320)

    assert result.resized
    assert (result.new_width, result.new_height) == (320, 160)
    with Image.open(path) as img:
        assert img.size == (320, 160)
        assert img.format == "JPEG"


def test_small_image_untouched(image_factory):
    path = image_factory("small.png", size=(100, 50))
    before = path.read_bytes()

    result = ImageResizer().scale_to_max_width(path, 300)

    assert not result.resized
    assert path.read_bytes() == before


def test_missing_file(tmp_path):
    with pytest.raises(NotFoundError):
        ImageResizer().scale_to_max_width(tmp_path / "none.jpg", 300)

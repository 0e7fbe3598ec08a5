import os
import sys
from pathlib import Path
from typing import Callable

import numpy as np
import pytest
from PIL import Image

# Ensure project root is on sys.path so 'image_optimizer' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("IMAGE_OPTIMIZER_BACKUP_DIR", ".backups")

ImageFactory = Callable[..., Path]


def make_image(path: Path, fmt: str, size=(64, 48), mode="RGB", seed=7, **save_kwargs) -> Path:
    """Write a noisy test image; noise keeps encoders from producing trivial files."""
    rng = np.random.default_rng(seed)
    w, h = size
    if mode == "RGBA":
        arr = rng.integers(0, 256, size=(h, w, 4), dtype=np.uint8)
        arr[..., 3] = 255
    elif mode == "L":
        arr = rng.integers(0, 256, size=(h, w), dtype=np.uint8)
    else:
        arr = rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8)
    img = Image.fromarray(arr)
    img.save(path, format=fmt, **save_kwargs)
    return path


@pytest.fixture()
def image_factory(tmp_path) -> ImageFactory:
    def _make(name: str, fmt: str | None = None, **kwargs) -> Path:
        path = tmp_path / name
        if fmt is None:
            fmt = {".jpg": "JPEG", ".jpeg": "JPEG", ".png": "PNG", ".webp": "WEBP"}[path.suffix.lower()]
        defaults = {"JPEG": {"quality": 100}, "PNG": {"compress_level": 0}, "WEBP": {"quality": 100}}
        options = {**defaults.get(fmt, {}), **kwargs.pop("save_kwargs", {})}
        return make_image(path, fmt, **kwargs, **options)

    return _make


@pytest.fixture()
def pipeline():
    from image_optimizer.main import create_pipeline

    return create_pipeline(max_workers=4)

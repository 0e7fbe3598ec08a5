"""
Batch optimization and concurrent access to the same image.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest
from PIL import Image

from image_optimizer.application.dtos.batch_dto import BatchItem
from image_optimizer.application.dtos.optimization_dto import OptimizationConfig
from image_optimizer.application.use_cases.batch_optimize_images import BatchOptimizeImagesUseCase
from image_optimizer.domain.exceptions import ErrorKind, IOFailureError


class TestBatchOptimize:
    def test_mixed_batch_continues_past_bad_items(self, pipeline, image_factory, tmp_path):
        jpg = image_factory("a.jpg")
        png = image_factory("b.png")
        txt = tmp_path / "c.txt"
        txt.write_text("text")

        response = pipeline.optimize_many(
            [
                BatchItem(path=str(jpg), identifier="1"),
                {"path": str(png), "identifier": "2"},
                (str(tmp_path / "missing.jpg"), "3"),
                (str(txt), "4"),
            ],
            OptimizationConfig(),
        )

        assert not response.aborted
        assert response.skipped == []
        assert [item.identifier for item in response.items] == ["1", "2", "3", "4"]
        assert response.succeeded == 2
        assert response.failed == 2
        assert response.items[2].error.kind is ErrorKind.NOT_FOUND
        assert response.items[3].error.kind is ErrorKind.UNSUPPORTED_TYPE
        assert response.total_savings == sum(item.result.savings for item in response.items[:2])

    def test_empty_batch(self, pipeline):
        response = pipeline.optimize_many([])
        assert response.items == []
        assert not response.aborted

    def test_fatal_error_stops_pending_items(self):
        optimize = MagicMock()
        optimize.execute.side_effect = IOFailureError("disk full")
        batch = BatchOptimizeImagesUseCase(optimize=optimize, max_workers=1)

        response = batch.execute([("a.jpg", "1"), ("b.jpg", "2"), ("c.jpg", "3")], OptimizationConfig())

        assert response.aborted
        assert len(response.items) == 1
        assert response.items[0].error.kind is ErrorKind.IO_FAILURE
        assert response.items[0].error.is_fatal
        assert [item.identifier for item in response.skipped] == ["2", "3"]
        assert optimize.execute.call_count == 1

    def test_worker_count_from_env(self, monkeypatch):
        monkeypatch.setenv("IMAGE_OPTIMIZER_MAX_WORKERS", "2")
        assert BatchOptimizeImagesUseCase(optimize=MagicMock())._worker_count() == 2
        assert BatchOptimizeImagesUseCase(optimize=MagicMock(), max_workers=6)._worker_count() == 6

    @pytest.mark.parametrize("raw,expected", [("many", 4), ("", 4), ("0", 1), ("-3", 1)])
    def test_bad_worker_count_falls_back(self, monkeypatch, raw, expected):
        monkeypatch.setenv("IMAGE_OPTIMIZER_MAX_WORKERS", raw)
        optimize = MagicMock()
        optimize.execute.side_effect = IOFailureError("disk full")
        batch = BatchOptimizeImagesUseCase(optimize=optimize)

        assert batch._worker_count() == expected
        response = batch.execute([("a.jpg", "1")], OptimizationConfig())
        assert response.failed == 1


def test_concurrent_optimize_of_same_image(pipeline, image_factory):
    """Racing calls on one image never corrupt the file or its backup."""
    path = image_factory("shared.jpg", size=(256, 256))
    original = path.read_bytes()

    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(lambda _: pipeline.optimize(path, "77"), range(8)))

    assert len(results) == 8
    assert pipeline.backups.backup_path_for(path, "77").read_bytes() == original
    with Image.open(path) as img:
        img.load()
        assert img.size == (256, 256)
    leftovers = [p.name for p in path.parent.iterdir() if p.name.endswith(".tmp")]
    assert leftovers == []


def test_concurrent_optimize_and_revert(pipeline, image_factory):
    path = image_factory("toggle.png", size=(128, 128))
    original = path.read_bytes()
    pipeline.optimize(path, "8")

    def work(i):
        if i % 2:
            return pipeline.revert(path, "8")
        return pipeline.optimize(path, "8")

    with ThreadPoolExecutor(max_workers=6) as executor:
        list(executor.map(work, range(12)))

    pipeline.revert(path, "8")
    assert path.read_bytes() == original

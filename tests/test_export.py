"""Tests for saving rank volumes as layer images."""

import numpy as np
import pytest
from PIL import Image

from dither3d import ExportError, save_layers, to_uint8
from dither3d.export import layer_path, load_layers


def _ranks(d0=4, d1=3, d2=2):
    n = d0 * d1 * d2
    return (np.arange(n, dtype=np.float64) / n).reshape(d2, d1, d0)


class TestPixelMapping:
    def test_round_and_saturate(self):
        out = to_uint8(np.array([0.0, 0.5, 1 / 256, 0.999, 1.2, -0.1]))
        assert out.dtype == np.uint8
        assert out.tolist() == [0, 128, 1, 255, 255, 0]


class TestSaveLayers:
    def test_one_file_per_layer(self, tmp_path):
        out = tmp_path / "nested" / "4x3x2"
        paths = save_layers(_ranks(), out)
        assert paths == [out / "layer_0.png", out / "layer_1.png"]
        assert all(p.exists() for p in paths)

    def test_image_geometry_and_values(self, tmp_path):
        ranks = _ranks()
        save_layers(ranks, tmp_path)
        with Image.open(tmp_path / "layer_1.png") as img:
            assert img.mode == "L"
            assert img.size == (4, 3)  # width d0, height d1
            pixels = np.asarray(img)
        assert np.array_equal(pixels, to_uint8(ranks[1]))

    def test_round_trip_through_disk(self, tmp_path):
        ranks = _ranks(5, 5, 3)
        save_layers(ranks, tmp_path, prefix="slice_", ext=".png")
        loaded = load_layers(tmp_path, 3, prefix="slice_")
        assert np.array_equal(loaded, to_uint8(ranks))

    def test_naming(self, tmp_path):
        assert layer_path(tmp_path, 12, "z", ".bmp") == tmp_path / "z12.bmp"

    def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(ExportError):
            save_layers(_ranks(), blocker / "out")

    def test_unknown_extension(self, tmp_path):
        with pytest.raises(ExportError):
            save_layers(_ranks(), tmp_path, ext=".notaformat")

    def test_rejects_flat_input(self, tmp_path):
        with pytest.raises(ExportError):
            save_layers(np.zeros((4, 4)), tmp_path)

    def test_missing_layer_on_load(self, tmp_path):
        with pytest.raises(ExportError):
            load_layers(tmp_path, 1)

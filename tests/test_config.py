"""
Tests for FilterConfig validation and neighborhood selection.
"""
from __future__ import annotations

import numpy as np
import pytest

from localfilters.config import FilterConfig
from localfilters.neighborhood import CenteredBox, Kernel


class TestFilterConfig:

    def test_defaults(self):
        cfg = FilterConfig()
        assert cfg.operation == "erode"
        assert cfg.size == 3
        assert cfg.threads == 1
        assert cfg.output_format == "npy"
        assert cfg.write_summary

    def test_size_list_becomes_tuple(self):
        assert FilterConfig(size=[3, 5]).size == (3, 5)

    @pytest.mark.parametrize("kwargs, match", [
        ({"operation": "median"}, "operation"),
        ({"size": 4}, "size"),
        ({"size": (3, 0)}, "size"),
        ({"radius": -1.0}, "radius"),
        ({"operation": "top_hat", "smooth_size": 2}, "smooth_size"),
        ({"operation": "top_hat", "smooth_radius": -0.5}, "smooth_radius"),
        ({"operation": "erode", "smooth_size": 3}, "pre-smoothing"),
        ({"dtype": "not-a-type"}, "dtype"),
        ({"threads": 0}, "threads"),
        ({"output_format": "png"}, "output_format"),
    ])
    def test_validation(self, kwargs, match):
        with pytest.raises(ValueError, match=match):
            FilterConfig(**kwargs)

    def test_box_neighborhood(self):
        B = FilterConfig(size=(3, 5)).neighborhood(2)
        assert B == CenteredBox((3, 5))

    def test_radius_overrides_size(self):
        B = FilterConfig(size=7, radius=1.0).neighborhood(3)
        assert isinstance(B, Kernel)
        assert B.shape == (3, 3, 3)

    def test_kernel_path_overrides_radius(self, tmp_path):
        path = tmp_path / "k.npy"
        np.save(path, np.array([[0.0, 1.0, 0.0]]))
        B = FilterConfig(radius=2.0, kernel_path=str(path)).neighborhood(2)
        assert B.dtype == np.float64
        assert B.limits() == ((0, -1), (0, 1))

    def test_smoothing(self):
        assert FilterConfig(operation="top_hat").smoothing(2) is None
        S = FilterConfig(operation="bottom_hat", smooth_size=5).smoothing(2)
        assert S == CenteredBox((5, 5))
        S = FilterConfig(operation="top_hat", smooth_radius=1.0).smoothing(2)
        assert S.shape == (3, 3)

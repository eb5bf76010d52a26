"""
测试二次方程求根
"""

import pytest

from usl_estimate.model.quadratic import real_roots, smallest_positive_root


class TestSmallestPositiveRoot:
    """测试最小正根选择"""

    def test_two_positive_roots(self):
        # (x - 1)(x - 2)
        assert smallest_positive_root(1, -3, 2) == pytest.approx(1)

    def test_one_positive_root(self):
        # (x - 2)(x + 2)
        assert smallest_positive_root(1, 0, -4) == pytest.approx(2)

    def test_negative_discriminant(self):
        assert smallest_positive_root(1, 2, 5) is None

    def test_only_negative_roots(self):
        assert smallest_positive_root(1, 3, 2) is None

    def test_linear(self):
        assert smallest_positive_root(0, 2, -4) == pytest.approx(2)
        assert smallest_positive_root(0, 2, 4) is None
        assert smallest_positive_root(0, 0, 1) is None

    def test_zero_root_is_not_positive(self):
        assert smallest_positive_root(1, -1, 0) == pytest.approx(1)
        assert smallest_positive_root(0, 0, 0) is None

    def test_small_leading_coefficient(self):
        """a 很小时较小根仍然精确"""
        root = smallest_positive_root(1e-10, -1, 1)
        assert root == pytest.approx(1.0, rel=1e-9)

    def test_roots_sorted(self):
        assert real_roots(-1, 0, 4) == pytest.approx((-2, 2))
        assert real_roots(1, -2, 1) == pytest.approx((1, 1))

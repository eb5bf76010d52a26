"""
测试正规方程回归与非线性细化
"""

import pytest

from usl_estimate import DegenerateFit, InsufficientData, Measurement, Model
from usl_estimate.model import regression
from usl_estimate.model.regression import (
    QuadraticFit,
    fit_coefficients,
    fit_quadratic,
    solve_linear_system,
    usl_throughput,
)


def synthetic_measurements(sigma, kappa, lambda_, levels):
    """由已知系数生成无噪声测量值"""
    return [
        Measurement.of_concurrency_and_throughput(n, usl_throughput(n, sigma, kappa, lambda_))
        for n in levels
    ]


class TestLinearSystem:
    """测试3x3线性方程组求解"""

    def test_solve(self):
        matrix = [[2, 1, -1], [-3, -1, 2], [-2, 1, 2]]
        solution, rank = solve_linear_system(matrix, [8, -11, -3])
        assert rank == 3
        assert solution == pytest.approx([2, 3, -1])

    def test_rank_deficient(self):
        """奇异列取 0"""
        matrix = [[1, 2, 3], [2, 4, 6], [1, 0, 1]]
        _, rank = solve_linear_system(matrix, [1, 2, 1])
        assert rank == 2


class TestQuadraticFit:
    """测试二次回归"""

    def test_empty(self):
        with pytest.raises(InsufficientData):
            fit_quadratic([])

    def test_empty_generator(self):
        with pytest.raises(InsufficientData):
            fit_coefficients(m for m in [])

    def test_single_concurrency_level(self):
        """所有测量值并发相同时方程组奇异"""
        measurements = [
            Measurement.of_concurrency_and_throughput(5, x) for x in (100, 110, 105)
        ]
        with pytest.raises(DegenerateFit):
            fit_coefficients(measurements)

    def test_exact_recovery(self):
        """无噪声数据精确还原系数"""
        measurements = synthetic_measurements(0.05, 0.001, 100, range(1, 21))
        result = fit_coefficients(measurements, refine=False)
        assert result.sigma == pytest.approx(0.05, rel=1e-6)
        assert result.kappa == pytest.approx(0.001, rel=1e-6)
        assert result.lambda_ == pytest.approx(100, rel=1e-6)
        assert not result.refined

    def test_quadratic_relation(self):
        """a = (1-σ)/λ, b = (σ-κ)/λ, c = κ/λ"""
        measurements = synthetic_measurements(0.1, 0.01, 50, [1, 2, 4, 8, 16])
        quadratic, count, levels = fit_quadratic(measurements)
        assert count == 5
        assert levels == 5
        assert quadratic.a == pytest.approx(0.9 / 50, rel=1e-6)
        assert quadratic.b == pytest.approx(0.09 / 50, rel=1e-6)
        assert quadratic.c == pytest.approx(0.01 / 50, rel=1e-6)

    def test_two_levels_degenerate(self):
        """只有两个并发取值时不报错，一致性系数取 0"""
        measurements = [
            Measurement.of_concurrency_and_throughput(1, 100),
            Measurement.of_concurrency_and_throughput(2, 180),
        ]
        result = fit_coefficients(measurements)
        assert result.kappa == 0
        assert result.lambda_ == pytest.approx(100)
        assert result.sigma == pytest.approx(1 / 9)
        assert not result.refined
        assert Model.from_fit(result).is_limitless()

    @pytest.mark.parametrize("refine", [False, True])
    def test_clustered_high_concurrency(self, refine):
        """并发取值集中在高位时仍能还原系数"""
        measurements = synthetic_measurements(0.05, 0.001, 100, [1000, 1001, 1002, 1003])
        result = fit_coefficients(measurements, refine=refine)
        assert result.concurrency_levels == 4
        assert result.sigma == pytest.approx(0.05, rel=1e-4)
        assert result.kappa == pytest.approx(0.001, rel=1e-4)
        assert result.lambda_ == pytest.approx(100, rel=1e-4)

    def test_wide_range(self):
        measurements = synthetic_measurements(0.02, 0.0005, 1000, [1, 10, 100, 1000, 10000])
        result = fit_coefficients(measurements, refine=False)
        assert result.sigma == pytest.approx(0.02, rel=1e-6)
        assert result.kappa == pytest.approx(0.0005, rel=1e-6)
        assert result.lambda_ == pytest.approx(1000, rel=1e-6)

    @pytest.mark.parametrize("quadratic", [QuadraticFit(1.0, -1.0, 0.0), QuadraticFit(-1.0, 0.5, 0.0)])
    def test_non_positive_lambda(self, quadratic):
        with pytest.raises(DegenerateFit):
            quadratic.to_coefficients()

    def test_order_independent(self, cisco_measurements):
        forward = fit_coefficients(cisco_measurements, refine=False)
        backward = fit_coefficients(list(reversed(cisco_measurements)), refine=False)
        assert forward.sigma == pytest.approx(backward.sigma, rel=1e-9)
        assert forward.kappa == pytest.approx(backward.kappa, rel=1e-9)
        assert forward.lambda_ == pytest.approx(backward.lambda_, rel=1e-9)

    def test_deterministic(self, cisco_measurements):
        first = fit_coefficients(cisco_measurements)
        second = fit_coefficients(cisco_measurements)
        assert first == second


class TestRefinement:
    """测试非线性细化"""

    def test_quadratic_only(self, cisco_measurements):
        """不细化时为 N/X 的二次回归结果"""
        result = fit_coefficients(cisco_measurements, refine=False)
        assert result.sigma == pytest.approx(0.0214855, rel=1e-4)
        assert result.kappa == pytest.approx(8.609103e-4, rel=1e-4)
        assert result.lambda_ == pytest.approx(963.4803, rel=1e-4)

    def test_refined(self, cisco_measurements):
        result = fit_coefficients(cisco_measurements)
        assert result.refined
        assert result.points == 32
        assert result.concurrency_levels == 32
        assert result.r_squared > 0.99

    def test_refinement_reduces_residuals(self, cisco_measurements):
        quadratic = fit_coefficients(cisco_measurements, refine=False)
        refined = fit_coefficients(cisco_measurements)
        assert refined.residual_sum_squares <= quadratic.residual_sum_squares

    def test_refinement_failure_keeps_quadratic(self, cisco_measurements, monkeypatch, caplog):
        def failing_curve_fit(*args, **kwargs):
            raise RuntimeError("Optimal parameters not found")

        monkeypatch.setattr(regression, "curve_fit", failing_curve_fit)
        result = fit_coefficients(cisco_measurements)
        expected = fit_coefficients(cisco_measurements, refine=False)

        assert not result.refined
        assert result.sigma == expected.sigma
        assert "Nonlinear refinement failed" in caplog.text

"""
USL 系数回归

吞吐量定律 X(N) = λN / (1 + σ(N-1) + κN(N-1)) 可改写为
N / X(N) = (1-σ)/λ + ((σ-κ)/λ)·N + (κ/λ)·N²，
因此对 y = N/X 做关于 N、N² 的二次最小二乘回归即可直接得到三个系数。

二次回归通过正规方程（3x3 线性方程组）精确求解；在此基础上可选地以
Levenberg-Marquardt 对吞吐量残差做非线性最小二乘细化，得到与直接拟合
吞吐量曲线一致的结果。
"""

import logging
import math
import warnings
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
from scipy.optimize import OptimizeWarning, curve_fit

from ..exceptions import DegenerateFit, InsufficientData
from ..measurement import Measurement

logger = logging.getLogger(__name__)

# 主元相对于矩阵最大元素的阈值，低于该值视为奇异
SINGULAR_TOLERANCE = 1e-12

DEFAULT_MAX_EVALUATIONS = 10000
DEFAULT_TOLERANCE = 1e-10


@dataclass(frozen=True)
class QuadraticFit:
    """y = a + b·N + c·N² 的回归系数"""
    a: float
    b: float
    c: float

    def to_coefficients(self) -> Tuple[float, float, float]:
        """
        换算为 USL 系数

        Returns:
            (sigma, kappa, lambda_)
        """
        total = self.a + self.b + self.c
        # total = 1/λ，必须为正
        if not total > 0 or not math.isfinite(total):
            raise DegenerateFit(f"Cannot recover coefficients from quadratic fit: {self}")

        lambda_ = 1 / total
        sigma = lambda_ * (self.b + self.c)
        kappa = lambda_ * self.c
        if not all(math.isfinite(v) for v in (sigma, kappa, lambda_)):
            raise DegenerateFit(f"Non-finite coefficients from quadratic fit: {self}")
        return sigma, kappa, lambda_


@dataclass(frozen=True)
class FitResult:
    """拟合结果"""
    sigma: float
    kappa: float
    lambda_: float
    quadratic: QuadraticFit
    points: int                   # 测量值个数
    concurrency_levels: int       # 不同并发取值的个数
    refined: bool                 # 是否经过非线性细化
    residual_sum_squares: float   # 吞吐量残差平方和
    r_squared: float              # 吞吐量拟合优度


def usl_throughput(n, sigma, kappa, lambda_):
    """USL 吞吐量定律，n 可以是标量或 numpy 数组"""
    return (lambda_ * n) / (1 + sigma * (n - 1) + kappa * n * (n - 1))


def solve_linear_system(matrix: Sequence[Sequence[float]],
                        vector: Sequence[float],
                        tolerance: float = SINGULAR_TOLERANCE) -> Tuple[List[float], int]:
    """
    高斯消元（部分主元）求解方阵线性方程组

    主元过小的列视为自由变量并取 0。

    Args:
        matrix: n x n 系数矩阵
        vector: 长度为 n 的右端向量
        tolerance: 主元相对阈值

    Returns:
        (解向量, 矩阵的秩)
    """
    size = len(vector)
    augmented = [list(map(float, row)) + [float(value)] for row, value in zip(matrix, vector)]
    scale = max((abs(v) for row in augmented for v in row[:size]), default=0.0)
    threshold = tolerance * scale

    pivots = []  # (行, 列)
    row = 0
    for col in range(size):
        if row >= size:
            break
        pivot_row = max(range(row, size), key=lambda r: abs(augmented[r][col]))
        if abs(augmented[pivot_row][col]) <= threshold:
            continue
        augmented[row], augmented[pivot_row] = augmented[pivot_row], augmented[row]

        for r in range(row + 1, size):
            factor = augmented[r][col] / augmented[row][col]
            if factor:
                for c in range(col, size + 1):
                    augmented[r][c] -= factor * augmented[row][c]

        pivots.append((row, col))
        row += 1

    solution = [0.0] * size
    for r, col in reversed(pivots):
        remainder = augmented[r][size] - sum(augmented[r][c] * solution[c] for c in range(col + 1, size))
        solution[col] = remainder / augmented[r][col]

    return solution, len(pivots)


def fit_quadratic(measurements: Iterable[Measurement]) -> Tuple[QuadraticFit, int, int]:
    """
    对 y = N/X 做二次最小二乘回归

    Args:
        measurements: 测量值集合

    Returns:
        (二次回归系数, 测量值个数, 不同并发取值个数)
    """
    points = list(measurements)
    if not points:
        raise InsufficientData("At least one measurement is required to fit a model")

    levels = {m.concurrency for m in points}
    # 以 u = (N - center) / scale 回归，使 u 落在 [-1, 1]，
    # 避免高并发下 N⁴ 量级的矩阵元素淹没主元
    low, high = min(levels), max(levels)
    center = (low + high) / 2
    scale = (high - low) / 2 or 1.0

    count = 0
    s1 = s2 = s3 = s4 = 0.0
    t0 = t1 = t2 = 0.0
    for m in points:
        u = (m.concurrency - center) / scale
        y = m.concurrency / m.throughput
        u2 = u * u
        count += 1
        s1 += u
        s2 += u2
        s3 += u2 * u
        s4 += u2 * u2
        t0 += y
        t1 += y * u
        t2 += y * u2

    matrix = [
        [count, s1, s2],
        [s1, s2, s3],
        [s2, s3, s4],
    ]
    (a, b, c), rank = solve_linear_system(matrix, [t0, t1, t2])
    logger.debug("Normal equations: n=%d, levels=%d, rank=%d, center=%g, scale=%g, solution=%s",
                 count, len(levels), rank, center, scale, (a, b, c))

    if rank < 2:
        raise DegenerateFit(
            f"Singular regression system: {count} measurements at {len(levels)} concurrency level(s)"
        )
    if rank < 3:
        logger.warning("Only %d distinct concurrency levels, coherency term is undetermined",
                       len(levels))

    # 换回关于 N 的系数
    return QuadraticFit(
        a=a - b * center / scale + c * center * center / (scale * scale),
        b=b / scale - 2 * c * center / (scale * scale),
        c=c / (scale * scale),
    ), count, len(levels)


def refine_coefficients(measurements: Sequence[Measurement],
                        initial: Tuple[float, float, float],
                        max_evaluations: int = DEFAULT_MAX_EVALUATIONS,
                        tolerance: float = DEFAULT_TOLERANCE) -> Optional[Tuple[float, float, float]]:
    """
    以非线性最小二乘细化系数

    以二次回归得到的系数为初值，直接最小化吞吐量残差平方和。

    Args:
        measurements: 测量值序列
        initial: 初始 (sigma, kappa, lambda_)
        max_evaluations: 最大函数求值次数
        tolerance: 收敛阈值

    Returns:
        细化后的 (sigma, kappa, lambda_)；未收敛时返回 None
    """
    concurrency = np.array([m.concurrency for m in measurements], dtype=float)
    throughput = np.array([m.throughput for m in measurements], dtype=float)

    with warnings.catch_warnings():
        # 协方差无法估计时的警告与系数本身无关
        warnings.simplefilter("ignore", OptimizeWarning)
        try:
            popt, _ = curve_fit(usl_throughput, concurrency, throughput,
                                p0=list(initial), method="lm",
                                maxfev=max_evaluations, xtol=tolerance, ftol=tolerance)
        except (RuntimeError, ValueError) as e:
            logger.warning("Nonlinear refinement failed, keeping quadratic fit: %s", e)
            return None

    if not np.all(np.isfinite(popt)) or popt[2] <= 0:
        logger.warning("Nonlinear refinement produced invalid coefficients: %s", popt)
        return None

    return float(popt[0]), float(popt[1]), float(popt[2])


def goodness_of_fit(measurements: Sequence[Measurement],
                    sigma: float, kappa: float, lambda_: float) -> Tuple[float, float]:
    """
    计算吞吐量拟合的残差平方和与 R²

    Returns:
        (残差平方和, R²)；吞吐量全部相同时 R² 为 nan
    """
    observed = [m.throughput for m in measurements]
    predicted = [usl_throughput(m.concurrency, sigma, kappa, lambda_) for m in measurements]

    mean = math.fsum(observed) / len(observed)
    ss_res = math.fsum((o - p) ** 2 for o, p in zip(observed, predicted))
    ss_tot = math.fsum((o - mean) ** 2 for o in observed)
    r_squared = 1 - ss_res / ss_tot if ss_tot > 0 else float("nan")
    return ss_res, r_squared


def fit_coefficients(measurements: Iterable[Measurement],
                     refine: bool = True,
                     max_evaluations: int = DEFAULT_MAX_EVALUATIONS,
                     tolerance: float = DEFAULT_TOLERANCE) -> FitResult:
    """
    由测量值拟合 USL 系数

    Args:
        measurements: 测量值集合
        refine: 是否在二次回归基础上做非线性细化
        max_evaluations: 细化时的最大函数求值次数
        tolerance: 细化时的收敛阈值

    Returns:
        拟合结果
    """
    points = list(measurements)
    quadratic, count, levels = fit_quadratic(points)
    sigma, kappa, lambda_ = quadratic.to_coefficients()
    logger.debug("Quadratic fit: sigma=%g, kappa=%g, lambda=%g", sigma, kappa, lambda_)

    refined = False
    if refine and levels >= 3:
        result = refine_coefficients(points, (sigma, kappa, lambda_), max_evaluations, tolerance)
        if result is not None:
            sigma, kappa, lambda_ = result
            refined = True
            logger.debug("Refined fit: sigma=%g, kappa=%g, lambda=%g", sigma, kappa, lambda_)

    ss_res, r_squared = goodness_of_fit(points, sigma, kappa, lambda_)
    return FitResult(
        sigma=sigma,
        kappa=kappa,
        lambda_=lambda_,
        quadratic=quadratic,
        points=count,
        concurrency_levels=levels,
        refined=refined,
        residual_sum_squares=ss_res,
        r_squared=r_squared,
    )

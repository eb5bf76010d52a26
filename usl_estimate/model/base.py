"""
USL 模型定义

模型由三个系数完全确定：
- sigma (σ): 竞争系数，随并发线性增长的串行化开销
- kappa (κ): 一致性系数，随并发平方增长的协调开销
- lambda_ (λ): 理想吞吐量，单个并发在无开销时的吞吐量

所有查询都是吞吐量定律的代数变形，反查通过二次方程的解析解完成。
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from ..exceptions import InvalidModel, UnreachableLatency, UnreachableThroughput
from ..measurement import Measurement
from .quadratic import smallest_positive_root
from .regression import (
    DEFAULT_MAX_EVALUATIONS,
    DEFAULT_TOLERANCE,
    FitResult,
    fit_coefficients,
    usl_throughput,
)


@dataclass(frozen=True)
class Model:
    """USL 模型"""
    sigma: float
    kappa: float
    lambda_: float

    def __post_init__(self):
        if not all(math.isfinite(v) for v in (self.sigma, self.kappa, self.lambda_)):
            raise InvalidModel(f"Coefficients must be finite: {self}")
        if self.lambda_ <= 0:
            raise InvalidModel(f"Ideal throughput must be positive, got {self.lambda_}")

    @classmethod
    def of(cls, sigma: float, kappa: float, lambda_: float) -> "Model":
        """由已知系数直接构造模型（用于假设分析）"""
        return cls(float(sigma), float(kappa), float(lambda_))

    @classmethod
    def from_fit(cls, fit: FitResult) -> "Model":
        """由拟合结果构造模型"""
        return cls(fit.sigma, fit.kappa, fit.lambda_)

    @classmethod
    def build(cls, measurements: Iterable[Measurement], refine: bool = True) -> "Model":
        """
        由测量值拟合模型

        Args:
            measurements: 测量值集合，不能为空
            refine: 是否做非线性细化

        Returns:
            拟合得到的模型
        """
        return cls.from_fit(fit_coefficients(measurements, refine=refine))

    def throughput_at_concurrency(self, n: float) -> float:
        """给定并发下的吞吐量 X(N) = λN / (1 + σ(N-1) + κN(N-1))"""
        return usl_throughput(n, self.sigma, self.kappa, self.lambda_)

    def latency_at_concurrency(self, n: float) -> float:
        """给定并发下的延迟 L(N) = N / X(N)"""
        return (1 + self.sigma * (n - 1) + self.kappa * n * (n - 1)) / self.lambda_

    def concurrency_at_throughput(self, x: float) -> float:
        """
        达到给定吞吐量所需的并发

        求解 κX·N² + (σX - κX - λ)·N + (X - σX) = 0，取峰值前分支的较小根。

        Raises:
            UnreachableThroughput: 吞吐量超过模型可达的最大值
        """
        if x <= 0:
            raise UnreachableThroughput(f"Throughput must be positive, got {x}")

        n = smallest_positive_root(
            self.kappa * x,
            self.sigma * x - self.kappa * x - self.lambda_,
            x - self.sigma * x,
        )
        if n is None:
            raise UnreachableThroughput(f"Throughput {x} is not reachable by {self}")
        return n

    def latency_at_throughput(self, x: float) -> float:
        """
        给定吞吐量下的延迟 (σ - 1) / (σX - λ)

        κ = 0 时与 concurrency_at_throughput(x) / x 一致。

        Raises:
            UnreachableThroughput: 结果不是正的有限延迟
        """
        denominator = self.sigma * x - self.lambda_
        if denominator == 0:
            raise UnreachableThroughput(f"Throughput {x} is not reachable by {self}")

        latency = (self.sigma - 1) / denominator
        if not math.isfinite(latency) or latency <= 0:
            raise UnreachableThroughput(f"Throughput {x} is not reachable by {self}")
        return latency

    def concurrency_at_latency(self, latency: float) -> float:
        """
        给定延迟下的并发

        将 L = N / X(N) 代入吞吐量定律得 κ·N² + (σ - κ)·N + (1 - σ - λL) = 0，
        取最小正根。

        Raises:
            UnreachableLatency: 延迟低于模型可达的最小值
        """
        if latency <= 0:
            raise UnreachableLatency(f"Latency must be positive, got {latency}")

        n = smallest_positive_root(
            self.kappa,
            self.sigma - self.kappa,
            1 - self.sigma - self.lambda_ * latency,
        )
        if n is None:
            raise UnreachableLatency(f"Latency {latency} is not reachable by {self}")
        return n

    def throughput_at_latency(self, latency: float) -> float:
        """给定延迟下的吞吐量 X = N / L"""
        return self.concurrency_at_latency(latency) / latency

    def max_concurrency(self) -> float:
        """
        吞吐量达到峰值时的并发（取整）

        κ = 0 时吞吐量单调递增，返回 inf。峰值落在 N < 1 时返回 1。
        """
        if self.is_limitless():
            return math.inf
        return float(max(1, math.floor(math.sqrt(max(0.0, (1 - self.sigma) / self.kappa)))))

    def max_throughput(self) -> float:
        """峰值吞吐量；κ = 0 时返回 inf"""
        if self.is_limitless():
            return math.inf
        return self.throughput_at_concurrency(self.max_concurrency())

    def is_limitless(self) -> bool:
        """没有一致性开销时吞吐量无上限"""
        return self.kappa == 0

    def is_coherency_constrained(self) -> bool:
        """一致性开销占主导"""
        return self.kappa > self.sigma

    def is_contention_constrained(self) -> bool:
        """竞争开销占主导"""
        return self.sigma > self.kappa

    def to_dict(self) -> Dict[str, Any]:
        """获取模型系数"""
        return {
            "sigma": self.sigma,
            "kappa": self.kappa,
            "lambda": self.lambda_,
        }


class ModelBuilder:
    """逐个累积测量值后拟合模型"""

    def __init__(self, refine: bool = True):
        self.refine = refine
        self._measurements: List[Measurement] = []

    def add(self, measurement: Measurement) -> "ModelBuilder":
        """添加一个测量值"""
        self._measurements.append(measurement)
        return self

    def add_all(self, measurements: Iterable[Measurement]) -> "ModelBuilder":
        """添加多个测量值"""
        self._measurements.extend(measurements)
        return self

    def __len__(self) -> int:
        return len(self._measurements)

    def fit(self,
            max_evaluations: int = DEFAULT_MAX_EVALUATIONS,
            tolerance: float = DEFAULT_TOLERANCE) -> FitResult:
        """拟合并返回完整的拟合结果"""
        return fit_coefficients(self._measurements, refine=self.refine,
                                max_evaluations=max_evaluations, tolerance=tolerance)

    def build(self) -> Model:
        """拟合模型"""
        return Model.from_fit(self.fit())

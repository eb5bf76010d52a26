"""
测量值定义

一次观测可以用 (并发, 吞吐量)、(并发, 延迟) 或 (吞吐量, 延迟) 三种
等价方式描述，统一按 Little 定律 (N = X * L) 规范化为 (并发, 吞吐量)。
"""

import math
from dataclasses import dataclass

from ..exceptions import InvalidMeasurement


def _check_positive(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise InvalidMeasurement(f"{name} must be positive and finite, got {value}")
    return value


@dataclass(frozen=True)
class Measurement:
    """单次观测，规范形式为 (并发, 吞吐量)"""
    concurrency: float  # 并发数 N
    throughput: float   # 吞吐量 X（单位时间完成的工作量）

    def __post_init__(self):
        object.__setattr__(self, "concurrency", _check_positive("concurrency", self.concurrency))
        object.__setattr__(self, "throughput", _check_positive("throughput", self.throughput))

    @property
    def latency(self) -> float:
        """延迟 L = N / X"""
        return self.concurrency / self.throughput

    @classmethod
    def of_concurrency_and_throughput(cls, concurrency: float, throughput: float) -> "Measurement":
        """由并发和吞吐量构造"""
        return cls(concurrency, throughput)

    @classmethod
    def of_concurrency_and_latency(cls, concurrency: float, latency: float) -> "Measurement":
        """
        由并发和延迟构造

        Args:
            concurrency: 并发数
            latency: 每个请求的平均延迟

        Returns:
            吞吐量为 concurrency / latency 的测量值
        """
        concurrency = _check_positive("concurrency", concurrency)
        latency = _check_positive("latency", latency)
        return cls(concurrency, concurrency / latency)

    @classmethod
    def of_throughput_and_latency(cls, throughput: float, latency: float) -> "Measurement":
        """
        由吞吐量和延迟构造

        Args:
            throughput: 吞吐量
            latency: 每个请求的平均延迟

        Returns:
            并发为 throughput * latency 的测量值
        """
        throughput = _check_positive("throughput", throughput)
        latency = _check_positive("latency", latency)
        return cls(throughput * latency, throughput)

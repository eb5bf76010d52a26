"""
估算引擎模块

提供基于 USL 模型的容量分析，包括峰值吞吐量、瓶颈类型和预测。
"""

from .base import CapacityEstimator, classify_regime

__all__ = [
    "CapacityEstimator",
    "classify_regime",
]

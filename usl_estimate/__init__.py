"""
USL-Estimate: 基于通用可扩展性定律的容量估算工具

由并发/吞吐量的测量值拟合竞争系数σ、一致性系数κ和理想吞吐量λ，
并在并发、吞吐量、延迟之间进行解析换算。
"""

__version__ = "0.1.0"

from .exceptions import (
    USLError,
    InvalidMeasurement,
    InsufficientData,
    DegenerateFit,
    InvalidModel,
    UnreachableThroughput,
    UnreachableLatency,
)
from .measurement import Measurement
from .model import Model, ModelBuilder, FitResult, fit_coefficients
from .estimator import CapacityEstimator
from .datasets import dataset_registry, load_measurements_csv

__all__ = [
    "USLError",
    "InvalidMeasurement",
    "InsufficientData",
    "DegenerateFit",
    "InvalidModel",
    "UnreachableThroughput",
    "UnreachableLatency",
    "Measurement",
    "Model",
    "ModelBuilder",
    "FitResult",
    "fit_coefficients",
    "CapacityEstimator",
    "dataset_registry",
    "load_measurements_csv",
]

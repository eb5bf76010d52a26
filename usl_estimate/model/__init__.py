"""
模型模块

提供 USL 模型的拟合、查询和分类功能。
"""

from .base import Model, ModelBuilder
from .regression import FitResult, QuadraticFit, fit_coefficients
from .quadratic import smallest_positive_root

__all__ = [
    "Model",
    "ModelBuilder",
    "FitResult",
    "QuadraticFit",
    "fit_coefficients",
    "smallest_positive_root",
]

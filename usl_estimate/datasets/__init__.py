"""
数据集模块

提供内置基准测试数据和测量值文件的加载。
"""

from .registry import DatasetRegistry, DatasetSpecs, dataset_registry, load_measurements_csv

__all__ = [
    "DatasetRegistry",
    "DatasetSpecs",
    "dataset_registry",
    "load_measurements_csv",
]

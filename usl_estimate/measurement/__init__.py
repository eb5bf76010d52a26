"""
测量值模块

提供观测数据的规范化表示。
"""

from .base import Measurement

__all__ = ["Measurement"]

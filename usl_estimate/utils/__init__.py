"""
工具模块
"""

from .formatters import format_number, format_prediction, format_results

__all__ = ["format_number", "format_prediction", "format_results"]

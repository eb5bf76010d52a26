"""
全局配置模块

管理系统级的全局配置和设置。
"""

from .settings import Settings, configure_logging, get_settings, reset_settings

__all__ = ["Settings", "configure_logging", "get_settings", "reset_settings"]

"""
全局系统设置

定义系统级配置参数和默认值，支持以 USL_ESTIMATE_ 为前缀的环境变量覆盖。
"""

import logging
from pathlib import Path
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "USL_ESTIMATE_"


class Settings(BaseSettings):
    """系统设置类

    环境变量以 USL_ESTIMATE_ 为前缀覆盖同名字段，列表字段使用JSON格式，
    如 USL_ESTIMATE_REPORT_LEVELS="[1, 2, 4]"。
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        extra="ignore",
    )

    # 日志配置
    log_level: str = Field(default="WARNING", description="日志级别")
    log_file: Optional[str] = Field(default=None, description="日志文件路径")

    # 输出配置
    default_output_format: str = Field(default="table", description="默认输出格式")
    report_levels: List[int] = Field(
        default=[1, 2, 4, 8, 16, 32, 64],
        description="报告中预测的并发取值"
    )

    # 拟合配置
    refine_fit: bool = Field(default=True, description="是否做非线性最小二乘细化")
    max_evaluations: int = Field(default=10000, description="细化时的最大函数求值次数")
    fit_tolerance: float = Field(default=1e-10, description="细化时的收敛阈值")

    # 数据目录
    data_dir: str = Field(default="data", description="测量数据目录")


class ConfigManager:
    """配置管理器"""

    def __init__(self):
        self._settings: Optional[Settings] = None

    def get_settings(self) -> Settings:
        """获取设置实例（单例模式）"""
        if self._settings is None:
            self._settings = Settings()
        return self._settings

    def update_settings(self, **kwargs) -> None:
        """更新设置"""
        settings = self.get_settings()

        for key, value in kwargs.items():
            if hasattr(settings, key):
                setattr(settings, key, value)

    def reset(self) -> None:
        """丢弃当前设置，下次访问时重新加载"""
        self._settings = None

    def get_data_path(self, *args) -> Path:
        """获取数据文件路径"""
        settings = self.get_settings()
        return Path(settings.data_dir) / Path(*args)


# 全局配置管理器实例
config_manager = ConfigManager()


def get_settings() -> Settings:
    """获取全局设置"""
    return config_manager.get_settings()


def reset_settings() -> None:
    """重置全局设置"""
    config_manager.reset()


def get_data_path(*args) -> Path:
    """获取数据文件路径"""
    return config_manager.get_data_path(*args)


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    按设置配置日志

    Args:
        settings: 系统设置，默认使用全局设置
    """
    settings = settings or get_settings()
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )

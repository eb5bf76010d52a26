"""
pytest配置文件

定义测试的全局配置和fixture。
"""

import os
import pytest
import sys
from pathlib import Path

# 添加项目根目录到Python路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from usl_estimate.config import reset_settings
from usl_estimate.datasets import dataset_registry
from usl_estimate.model import Model


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """每个测试使用默认设置"""
    for name in list(os.environ):
        if name.startswith("USL_ESTIMATE_"):
            monkeypatch.delenv(name)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def cisco_measurements():
    """Cisco 基准测试测量值"""
    return dataset_registry.get_measurements("cisco")


@pytest.fixture
def cisco_model(cisco_measurements):
    """由 Cisco 测量值拟合的模型"""
    return Model.build(cisco_measurements)


@pytest.fixture
def synthetic_model():
    """σ = κ = 0.06, λ = 40 的假设模型"""
    return Model.of(0.06, 0.06, 40)

"""
数据集注册表

统一管理内置的基准测试数据，并支持从CSV文件加载测量值。
"""

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from ..config.settings import get_data_path
from ..exceptions import InvalidMeasurement
from ..measurement import Measurement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatasetSpecs:
    """数据集规格"""
    name: str
    description: str
    source: str
    points: Tuple[Tuple[float, float], ...]  # (并发, 吞吐量)


class DatasetRegistry:
    """数据集注册表类"""

    def __init__(self):
        self._datasets: Dict[str, DatasetSpecs] = {}
        self._load_built_in_datasets()

    def _load_built_in_datasets(self) -> None:
        """加载内置数据集"""

        # Cisco 基准测试，来自 Baron Schwartz《Practical Scalability Analysis with the USL》
        self.register(DatasetSpecs(
            name="cisco",
            description="Cisco 服务器基准测试，并发 1-32",
            source="Practical Scalability Analysis with the Universal Scalability Law",
            points=(
                (1, 955.16), (2, 1878.91), (3, 2688.01), (4, 3548.68),
                (5, 4315.54), (6, 5130.43), (7, 5931.37), (8, 6531.08),
                (9, 7219.8), (10, 7867.61), (11, 8278.71), (12, 8646.7),
                (13, 9047.84), (14, 9426.55), (15, 9645.37), (16, 9897.24),
                (17, 10097.6), (18, 10240.5), (19, 10532.39), (20, 10798.52),
                (21, 11151.43), (22, 11518.63), (23, 11806), (24, 12089.37),
                (25, 12075.41), (26, 12177.29), (27, 12211.41), (28, 12158.93),
                (29, 12155.27), (30, 12118.04), (31, 12140.4), (32, 12074.39),
            ),
        ))

    def register(self, specs: DatasetSpecs) -> None:
        """
        注册数据集

        Args:
            specs: 数据集规格
        """
        self._datasets[specs.name] = specs

    def get_measurements(self, name: str) -> List[Measurement]:
        """
        获取数据集的测量值

        Args:
            name: 数据集名称

        Returns:
            测量值列表
        """
        if name not in self._datasets:
            raise ValueError(f"Unsupported dataset: {name}")

        return [
            Measurement.of_concurrency_and_throughput(n, x)
            for n, x in self._datasets[name].points
        ]

    def list_datasets(self) -> List[str]:
        """获取所有内置数据集名称"""
        return list(self._datasets.keys())

    def get_dataset_info(self, name: str) -> Dict[str, Any]:
        """
        获取数据集信息

        Args:
            name: 数据集名称

        Returns:
            数据集信息字典
        """
        if name not in self._datasets:
            raise ValueError(f"Unsupported dataset: {name}")

        specs = self._datasets[name]
        concurrency = [n for n, _ in specs.points]
        return {
            "name": specs.name,
            "description": specs.description,
            "source": specs.source,
            "points": len(specs.points),
            "min_concurrency": min(concurrency),
            "max_concurrency": max(concurrency),
        }


def _measurement_from_row(row: Dict[str, str]) -> Measurement:
    """按行中出现的列选择构造方式"""
    values = {
        key: float(value)
        for key, value in row.items()
        if key in ("concurrency", "throughput", "latency") and value not in (None, "")
    }

    if "concurrency" in values and "throughput" in values:
        return Measurement.of_concurrency_and_throughput(values["concurrency"], values["throughput"])
    if "concurrency" in values and "latency" in values:
        return Measurement.of_concurrency_and_latency(values["concurrency"], values["latency"])
    if "throughput" in values and "latency" in values:
        return Measurement.of_throughput_and_latency(values["throughput"], values["latency"])

    raise InvalidMeasurement(f"Row needs two of concurrency/throughput/latency: {row}")


def load_measurements_csv(path: Union[str, Path]) -> List[Measurement]:
    """
    从CSV文件加载测量值

    文件需要表头，包含 concurrency、throughput、latency 中的任意两列；
    三列都存在时使用并发和吞吐量。

    Args:
        path: CSV文件路径；相对路径在当前目录下不存在时，
            到设置中的 data_dir 下查找

    Returns:
        测量值列表
    """
    path = Path(path)
    if not path.is_absolute() and not path.exists():
        path = get_data_path(path)

    measurements = []
    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        fieldnames = [name.strip().lower() for name in (reader.fieldnames or [])]
        reader.fieldnames = fieldnames

        for line_no, row in enumerate(reader, start=2):
            try:
                measurements.append(_measurement_from_row(row))
            except ValueError as e:
                raise InvalidMeasurement(f"{path}:{line_no}: {e}") from e

    logger.debug("Loaded %d measurements from %s", len(measurements), path)
    return measurements


# 全局数据集注册表实例
dataset_registry = DatasetRegistry()

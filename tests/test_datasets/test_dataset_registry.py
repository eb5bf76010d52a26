"""
测试数据集注册表和CSV加载
"""

import pytest

from usl_estimate import InvalidMeasurement
from usl_estimate.config.settings import config_manager
from usl_estimate.datasets import DatasetRegistry, DatasetSpecs, load_measurements_csv


class TestDatasetRegistry:
    """测试内置数据集"""

    @pytest.fixture
    def registry(self):
        return DatasetRegistry()

    def test_list_datasets(self, registry):
        assert "cisco" in registry.list_datasets()

    def test_cisco_measurements(self, registry):
        measurements = registry.get_measurements("cisco")
        assert len(measurements) == 32
        assert measurements[0].concurrency == 1
        assert measurements[0].throughput == pytest.approx(955.16)
        assert measurements[-1].concurrency == 32

    def test_dataset_info(self, registry):
        info = registry.get_dataset_info("cisco")
        assert info["points"] == 32
        assert info["min_concurrency"] == 1
        assert info["max_concurrency"] == 32

    def test_unknown_dataset(self, registry):
        with pytest.raises(ValueError):
            registry.get_measurements("unknown")
        with pytest.raises(ValueError):
            registry.get_dataset_info("unknown")

    def test_register(self, registry):
        registry.register(DatasetSpecs(
            name="tiny",
            description="测试数据",
            source="unit test",
            points=((1, 10), (2, 19), (4, 35)),
        ))
        assert "tiny" in registry.list_datasets()
        assert len(registry.get_measurements("tiny")) == 3


class TestLoadCsv:
    """测试CSV加载"""

    def test_concurrency_and_throughput(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("concurrency,throughput\n1,100\n2,190\n4,350\n", encoding="utf-8")

        measurements = load_measurements_csv(path)
        assert [m.concurrency for m in measurements] == [1, 2, 4]
        assert [m.throughput for m in measurements] == [100, 190, 350]

    def test_throughput_and_latency(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("Throughput, Latency\n100,0.01\n190,0.0105\n", encoding="utf-8")

        measurements = load_measurements_csv(path)
        assert measurements[0].concurrency == pytest.approx(1)
        assert measurements[1].concurrency == pytest.approx(1.995)

    def test_concurrency_and_latency(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("concurrency,latency\n2,0.5\n", encoding="utf-8")

        measurements = load_measurements_csv(path)
        assert measurements[0].throughput == pytest.approx(4)

    def test_relative_path_from_data_dir(self, tmp_path):
        (tmp_path / "bench.csv").write_text("concurrency,throughput\n1,100\n2,190\n", encoding="utf-8")
        config_manager.update_settings(data_dir=str(tmp_path))

        measurements = load_measurements_csv("bench.csv")
        assert [m.concurrency for m in measurements] == [1, 2]

    def test_missing_file(self, tmp_path):
        config_manager.update_settings(data_dir=str(tmp_path))
        with pytest.raises(FileNotFoundError):
            load_measurements_csv("absent.csv")

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("concurrency,other\n1,2\n", encoding="utf-8")

        with pytest.raises(InvalidMeasurement):
            load_measurements_csv(path)

    def test_bad_value(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("concurrency,throughput\n1,abc\n", encoding="utf-8")

        with pytest.raises(InvalidMeasurement, match="data.csv:2"):
            load_measurements_csv(path)

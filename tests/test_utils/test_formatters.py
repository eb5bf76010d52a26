"""
测试结果格式化
"""

import json

import pytest

from usl_estimate import CapacityEstimator, Measurement
from usl_estimate.utils import format_number, format_prediction, format_results


@pytest.fixture(scope="module")
def report():
    return CapacityEstimator().analyze_dataset("cisco", levels=[1, 8, 35])


class TestFormatNumber:
    """测试数值格式化"""

    def test_infinite(self):
        assert format_number(None) == "∞"

    def test_fixed(self):
        assert format_number(12.5, 2) == "12.50"
        assert format_number(0) == "0.0000"

    def test_scientific(self):
        assert format_number(0.00076909, 4) == "7.6909e-04"
        assert format_number(2.5e7, 1) == "2.5e+07"


class TestFormatResults:
    """测试容量报告格式化"""

    def test_table(self, report):
        text = format_results(report, "table")
        assert "σ (竞争)" in text
        assert "峰值并发" in text
        assert "建议:" in text

    def test_json(self, report):
        parsed = json.loads(format_results(report, "json"))
        assert parsed["dataset"] == "cisco"
        assert parsed["max_concurrency"] == 35

    def test_csv(self, report):
        lines = format_results(report, "csv").splitlines()
        assert len(lines) == len(report["predictions"]) + 1
        assert lines[1].startswith("cisco,")

    def test_limitless_table(self):
        measurements = [
            Measurement.of_concurrency_and_throughput(n, 100 * n / (1 + 0.1 * (n - 1)))
            for n in (1, 2)
        ]
        text = format_results(CapacityEstimator().analyze(measurements), "table")
        assert "∞" in text
        assert "无上限" in text


class TestFormatPrediction:
    """测试单点预测格式化"""

    @pytest.fixture
    def prediction(self, synthetic_model):
        return CapacityEstimator().predict(synthetic_model, throughput=20)

    def test_table(self, prediction):
        text = format_prediction(prediction)
        assert "σ=0.06" in text
        assert "延迟" in text

    def test_json(self, prediction):
        assert json.loads(format_prediction(prediction, "json"))["given"] == "throughput"

    def test_csv(self, prediction):
        header, row = format_prediction(prediction, "csv").splitlines()
        assert header == "given,concurrency,throughput,latency"
        assert row.startswith("throughput,")

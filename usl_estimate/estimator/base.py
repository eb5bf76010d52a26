"""
容量估算器

封装模型拟合、预测和容量分析报告的生成。
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from ..config import get_settings
from ..datasets import dataset_registry
from ..measurement import Measurement
from ..model import FitResult, Model, fit_coefficients

logger = logging.getLogger(__name__)


def classify_regime(model: Model) -> str:
    """
    判断模型的扩展瓶颈类型

    Returns:
        "limitless"、"contention"、"coherency" 或 "balanced"（σ == κ）
    """
    if model.is_limitless():
        return "limitless"
    if model.is_contention_constrained():
        return "contention"
    if model.is_coherency_constrained():
        return "coherency"
    return "balanced"


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


class CapacityEstimator:
    """容量估算器主类"""

    def __init__(self, refine: Optional[bool] = None,
                 max_evaluations: Optional[int] = None,
                 tolerance: Optional[float] = None):
        settings = get_settings()
        self.dataset_registry = dataset_registry
        self.refine = settings.refine_fit if refine is None else refine
        self.max_evaluations = max_evaluations or settings.max_evaluations
        self.tolerance = tolerance or settings.fit_tolerance

    def fit(self, measurements: Iterable[Measurement]) -> FitResult:
        """
        拟合测量值

        Args:
            measurements: 测量值集合

        Returns:
            拟合结果
        """
        result = fit_coefficients(measurements, refine=self.refine,
                                  max_evaluations=self.max_evaluations,
                                  tolerance=self.tolerance)
        logger.info("Fitted %d measurements: sigma=%g, kappa=%g, lambda=%g (refined=%s)",
                    result.points, result.sigma, result.kappa, result.lambda_, result.refined)
        return result

    def fit_dataset(self, dataset_name: str) -> FitResult:
        """拟合内置数据集"""
        return self.fit(self.dataset_registry.get_measurements(dataset_name))

    def analyze(self, measurements: Iterable[Measurement],
                levels: Optional[List[float]] = None,
                name: str = "custom") -> Dict[str, Any]:
        """
        拟合并生成容量分析报告

        Args:
            measurements: 测量值集合
            levels: 需要预测的并发取值，默认使用设置中的 report_levels
            name: 数据来源名称

        Returns:
            分析结果字典

        Raises:
            ValueError: 并发取值不是正数
        """
        levels = levels or get_settings().report_levels
        invalid = [n for n in levels if not n > 0]
        if invalid:
            raise ValueError(f"Concurrency levels must be positive: {invalid}")

        fit = self.fit(measurements)
        model = Model.from_fit(fit)

        return {
            "estimation_type": "usl_capacity",
            "dataset": name,
            "coefficients": model.to_dict(),
            "fit": {
                "points": fit.points,
                "concurrency_levels": fit.concurrency_levels,
                "refined": fit.refined,
                "residual_sum_squares": fit.residual_sum_squares,
                "r_squared": _finite_or_none(fit.r_squared),
            },
            "regime": classify_regime(model),
            "limitless": model.is_limitless(),
            "contention_constrained": model.is_contention_constrained(),
            "coherency_constrained": model.is_coherency_constrained(),
            "max_concurrency": _finite_or_none(model.max_concurrency()),
            "max_throughput": _finite_or_none(model.max_throughput()),
            "predictions": self._predict_levels(model, levels),
            "recommendations": self._generate_recommendations(model, fit),
        }

    def analyze_dataset(self, dataset_name: str,
                        levels: Optional[List[float]] = None) -> Dict[str, Any]:
        """分析内置数据集"""
        return self.analyze(self.dataset_registry.get_measurements(dataset_name),
                            levels=levels, name=dataset_name)

    def predict(self, model: Model,
                concurrency: Optional[float] = None,
                throughput: Optional[float] = None,
                latency: Optional[float] = None) -> Dict[str, Any]:
        """
        给定并发、吞吐量、延迟中的一个，求另外两个

        Args:
            model: USL 模型
            concurrency: 并发
            throughput: 吞吐量
            latency: 延迟

        Returns:
            包含三个量的字典
        """
        given = [k for k, v in (("concurrency", concurrency),
                                ("throughput", throughput),
                                ("latency", latency)) if v is not None]
        if len(given) != 1:
            raise ValueError("Exactly one of concurrency, throughput or latency is required")

        if concurrency is not None:
            throughput = model.throughput_at_concurrency(concurrency)
            latency = model.latency_at_concurrency(concurrency)
        elif throughput is not None:
            concurrency = model.concurrency_at_throughput(throughput)
            # 与并发保持 N = X·L
            latency = concurrency / throughput
        else:
            concurrency = model.concurrency_at_latency(latency)
            throughput = model.throughput_at_latency(latency)

        return {
            "given": given[0],
            "coefficients": model.to_dict(),
            "concurrency": concurrency,
            "throughput": throughput,
            "latency": latency,
        }

    def _predict_levels(self, model: Model, levels: List[float]) -> List[Dict[str, Any]]:
        """计算各并发取值下的吞吐量、延迟和扩展效率"""
        predictions = []
        for n in levels:
            throughput = model.throughput_at_concurrency(n)
            predictions.append({
                "concurrency": n,
                "throughput": throughput,
                "latency": model.latency_at_concurrency(n),
                # 相对线性扩展的效率
                "efficiency": throughput / (n * model.lambda_),
            })
        return predictions

    def _generate_recommendations(self, model: Model, fit: FitResult) -> List[str]:
        """基于拟合结果生成容量规划建议"""
        recommendations = []

        if fit.concurrency_levels < 3:
            recommendations.append(
                f"仅有 {fit.concurrency_levels} 个不同的并发取值，一致性系数无法确定，"
                "建议至少采集 3 个以上的并发水平"
            )
        elif fit.concurrency_levels < 6:
            recommendations.append("测量点较少，系数可能不稳定，建议增加测量的并发水平")

        if not math.isnan(fit.r_squared) and fit.r_squared < 0.9:
            recommendations.append(f"拟合优度较低 (R²={fit.r_squared:.3f})，请检查测量数据是否稳定")

        if model.sigma < 0 or model.kappa < 0:
            recommendations.append("出现负系数，测量数据可能不符合 USL 假设")

        if model.is_limitless():
            recommendations.append("一致性系数为 0，吞吐量随并发持续增长，但竞争开销仍会降低增长速度")
        else:
            recommendations.append(
                f"吞吐量在并发约 {model.max_concurrency():.0f} 时达到峰值 "
                f"{model.max_throughput():.1f}，超过该并发后吞吐量下降"
            )

        if model.is_contention_constrained():
            recommendations.append("竞争开销占主导：减少串行化（锁、共享队列、单点资源）")
        elif model.is_coherency_constrained():
            recommendations.append("一致性开销占主导：减少节点间协调（缓存一致性、分布式同步、广播）")

        return recommendations

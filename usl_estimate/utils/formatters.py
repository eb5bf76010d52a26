"""
数据格式化工具

将容量分析和预测结果格式化为表格、JSON或CSV。
"""

import json
from typing import Any, Dict, Optional
from tabulate import tabulate

REGIME_LABELS = {
    "limitless": "无上限（κ = 0）",
    "contention": "竞争受限（σ > κ）",
    "coherency": "一致性受限（κ > σ）",
    "balanced": "均衡（σ = κ）",
}


def format_number(value: Optional[float], digits: int = 4) -> str:
    """格式化数值，None 表示无穷大"""
    if value is None:
        return "∞"
    if value != 0 and (abs(value) < 1e-3 or abs(value) >= 1e6):
        return f"{value:.{digits}e}"
    return f"{value:.{digits}f}"


def format_results(result: Dict[str, Any], format_type: str = "table") -> str:
    """
    格式化容量分析结果

    Args:
        result: 分析结果字典
        format_type: 输出格式 ("table", "json", "csv")

    Returns:
        格式化后的字符串
    """
    if format_type == "json":
        return json.dumps(result, indent=2, ensure_ascii=False)

    elif format_type == "csv":
        return format_results_csv(result)

    else:  # table format
        return format_results_table(result)


def format_results_table(result: Dict[str, Any]) -> str:
    """格式化为表格形式"""
    lines = []
    lines.append("=== USL 容量分析结果 ===\n")
    lines.append(f"数据: {result['dataset']}")

    fit = result["fit"]
    lines.append(f"测量点: {fit['points']} (不同并发取值 {fit['concurrency_levels']})")
    lines.append(f"非线性细化: {'是' if fit['refined'] else '否'}")
    if fit["r_squared"] is not None:
        lines.append(f"拟合优度 R²: {fit['r_squared']:.6f}")
    lines.append("")

    coefficients = result["coefficients"]
    coefficient_data = [
        ["σ (竞争)", format_number(coefficients["sigma"], 8)],
        ["κ (一致性)", format_number(coefficients["kappa"], 8)],
        ["λ (理想吞吐量)", format_number(coefficients["lambda"], 4)],
        ["峰值并发", format_number(result["max_concurrency"], 0)],
        ["峰值吞吐量", format_number(result["max_throughput"], 2)],
        ["瓶颈类型", REGIME_LABELS.get(result["regime"], result["regime"])],
    ]
    lines.append("模型系数:")
    lines.append(tabulate(coefficient_data, headers=["指标", "值"], tablefmt="grid"))

    predictions = result.get("predictions", [])
    if predictions:
        prediction_data = [
            [
                f"{p['concurrency']:g}",
                format_number(p["throughput"], 2),
                format_number(p["latency"], 6),
                f"{p['efficiency'] * 100:.1f}%",
            ]
            for p in predictions
        ]
        lines.append("\n预测:")
        lines.append(tabulate(prediction_data,
                              headers=["并发", "吞吐量", "延迟", "扩展效率"],
                              tablefmt="grid"))

    if result.get("recommendations"):
        lines.append("\n建议:")
        for i, rec in enumerate(result["recommendations"], 1):
            lines.append(f"{i}. {rec}")

    return "\n".join(lines)


def format_results_csv(result: Dict[str, Any]) -> str:
    """格式化为CSV形式，每个预测点一行"""
    csv_lines = []

    headers = [
        "dataset", "sigma", "kappa", "lambda", "regime",
        "concurrency", "throughput", "latency", "efficiency"
    ]
    csv_lines.append(",".join(headers))

    coefficients = result["coefficients"]
    for p in result.get("predictions", []):
        values = [
            result.get("dataset", ""),
            str(coefficients["sigma"]),
            str(coefficients["kappa"]),
            str(coefficients["lambda"]),
            result.get("regime", ""),
            str(p["concurrency"]),
            str(p["throughput"]),
            str(p["latency"]),
            str(p["efficiency"]),
        ]
        csv_lines.append(",".join(values))

    return "\n".join(csv_lines)


def format_prediction(result: Dict[str, Any], format_type: str = "table") -> str:
    """
    格式化单点预测结果

    Args:
        result: 预测结果字典
        format_type: 输出格式 ("table", "json", "csv")

    Returns:
        格式化后的字符串
    """
    if format_type == "json":
        return json.dumps(result, indent=2, ensure_ascii=False)

    if format_type == "csv":
        return "\n".join([
            "given,concurrency,throughput,latency",
            ",".join([result["given"], str(result["concurrency"]),
                      str(result["throughput"]), str(result["latency"])]),
        ])

    coefficients = result["coefficients"]
    data = [
        ["并发", format_number(result["concurrency"], 4)],
        ["吞吐量", format_number(result["throughput"], 4)],
        ["延迟", format_number(result["latency"], 6)],
    ]
    lines = [
        f"模型: σ={coefficients['sigma']:.8g}, κ={coefficients['kappa']:.8g}, "
        f"λ={coefficients['lambda']:.8g}",
        tabulate(data, headers=["指标", "值"], tablefmt="grid"),
    ]
    return "\n".join(lines)

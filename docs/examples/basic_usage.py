#!/usr/bin/env python3
"""
USL-Estimate 基本使用示例

演示如何拟合测量数据并进行容量预测。
"""

import sys
import os

# 添加项目根目录到路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from usl_estimate import CapacityEstimator, Measurement, Model, ModelBuilder, USLError, dataset_registry


def main():
    """主函数"""
    print("=== USL-Estimate 基本使用示例 ===\n")

    # 1. 查看内置数据集
    print("内置数据集:")
    for name in dataset_registry.list_datasets():
        info = dataset_registry.get_dataset_info(name)
        print(f"  - {name}: {info['description']} ({info['points']} 个测量点)")
    print()

    # 2. 拟合内置数据集
    model = Model.build(dataset_registry.get_measurements("cisco"))
    print(f"σ = {model.sigma:.6f}, κ = {model.kappa:.8f}, λ = {model.lambda_:.2f}")
    print(f"峰值并发: {model.max_concurrency():.0f}")
    print(f"峰值吞吐量: {model.max_throughput():.1f}")
    print()

    # 3. 用构建器逐个添加测量值
    builder = ModelBuilder()
    builder.add(Measurement.of_concurrency_and_latency(1, 0.0102))
    builder.add(Measurement.of_concurrency_and_latency(4, 0.0121))
    builder.add(Measurement.of_throughput_and_latency(1150, 0.0139))
    builder.add(Measurement.of_concurrency_and_throughput(32, 1480))
    print(f"由 {len(builder)} 个测量值拟合: {builder.build().to_dict()}")
    print()

    # 4. 容量分析报告
    estimator = CapacityEstimator()
    print("分析 cisco 数据集...")
    try:
        result = estimator.analyze_dataset("cisco", levels=[1, 8, 16, 32, 48])

        print(f"瓶颈类型: {result['regime']}")
        print(f"拟合优度 R²: {result['fit']['r_squared']:.4f}")
        for p in result['predictions']:
            print(f"  并发 {p['concurrency']:>4g}: 吞吐量 {p['throughput']:.1f}, "
                  f"延迟 {p['latency'] * 1000:.3f} ms, 效率 {p['efficiency'] * 100:.1f}%")

        if result.get('recommendations'):
            print("\n建议:")
            for i, rec in enumerate(result['recommendations'], 1):
                print(f"  {i}. {rec}")

        # 5. 反向预测：达到给定吞吐量需要多少并发
        prediction = estimator.predict(model, throughput=10000)
        print(f"\n吞吐量 10000 需要并发 {prediction['concurrency']:.2f}，"
              f"延迟 {prediction['latency'] * 1000:.3f} ms")

    except USLError as e:
        print(f"估算失败: {e}")

    print("\n=== 示例完成 ===")


if __name__ == "__main__":
    main()

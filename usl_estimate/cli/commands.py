"""
CLI命令实现

提供命令行界面的具体命令实现：拟合测量数据、单点预测和数据集查询。
"""

import click
from typing import List, Optional
from tabulate import tabulate

from .. import __version__
from ..config import configure_logging, get_settings
from ..config.settings import config_manager
from ..datasets import dataset_registry, load_measurements_csv
from ..estimator import CapacityEstimator
from ..measurement import Measurement
from ..model import Model
from ..utils.formatters import format_prediction, format_results

FORMAT_CHOICES = ["table", "json", "csv"]


@click.group()
@click.version_option(version=__version__, prog_name="usl-estimate")
@click.option("--log-level", default=None, help="日志级别 (DEBUG/INFO/WARNING/ERROR)")
def cli(log_level: Optional[str]):
    """USL容量估算工具

    基于通用可扩展性定律 (Universal Scalability Law)，
    由并发/吞吐量测量值拟合竞争系数σ、一致性系数κ和理想吞吐量λ，
    并预测任意并发、吞吐量或延迟下的系统表现。
    """
    if log_level:
        config_manager.update_settings(log_level=log_level)
        configure_logging()


def parse_levels(levels: Optional[str]) -> Optional[List[float]]:
    """解析逗号分隔的并发列表"""
    if not levels:
        return None
    try:
        values = [float(x.strip()) for x in levels.split(",") if x.strip()]
    except ValueError:
        raise click.BadParameter(f"无法解析并发列表: {levels}", param_hint="--levels")
    if any(v <= 0 for v in values):
        raise click.BadParameter(f"并发必须为正数: {levels}", param_hint="--levels")
    return values


def load_measurements(dataset: Optional[str], input_file: Optional[str]) -> List[Measurement]:
    """从内置数据集或CSV文件加载测量值"""
    if bool(dataset) == bool(input_file):
        raise click.BadParameter("必须且只能指定 --dataset 或 --input 其中之一")
    if dataset:
        return dataset_registry.get_measurements(dataset)
    return load_measurements_csv(input_file)


def write_output(formatted_result: str, output_file: Optional[str]) -> None:
    """输出到文件或终端"""
    if output_file:
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(formatted_result)
        click.echo(f"结果已保存到: {output_file}")
    else:
        click.echo(formatted_result)


@cli.command()
@click.option("--dataset", "-d", help="内置数据集名称 (如: cisco)")
@click.option("--input", "-i", "input_file", type=click.Path(dir_okay=False),
              help="测量数据CSV文件，表头包含 concurrency/throughput/latency 中任意两列；"
                   "相对路径不存在时在 data_dir 下查找")
@click.option("--levels", "-l", help="需要预测的并发列表，逗号分隔")
@click.option("--no-refine", is_flag=True, help="只使用二次回归，不做非线性细化")
@click.option("--format", "-f", default=None, type=click.Choice(FORMAT_CHOICES), help="输出格式")
@click.option("--output-file", type=click.Path(), help="输出文件路径")
def fit(dataset: Optional[str], input_file: Optional[str], levels: Optional[str],
        no_refine: bool, format: Optional[str], output_file: Optional[str]):
    """拟合测量数据并生成容量分析报告"""
    level_list = parse_levels(levels)
    format = format or get_settings().default_output_format

    try:
        measurements = load_measurements(dataset, input_file)
        estimator = CapacityEstimator(refine=False if no_refine else None)
        result = estimator.analyze(measurements, levels=level_list,
                                   name=dataset or input_file)
        write_output(format_results(result, format), output_file)

    except click.BadParameter:
        raise
    except Exception as e:
        click.echo(f"错误: {e}", err=True)
        raise click.Abort()


@cli.command()
@click.option("--sigma", type=float, help="竞争系数σ")
@click.option("--kappa", type=float, help="一致性系数κ")
@click.option("--lambda", "lambda_", type=float, help="理想吞吐量λ")
@click.option("--dataset", "-d", help="由内置数据集拟合模型")
@click.option("--input", "-i", "input_file", type=click.Path(dir_okay=False),
              help="由测量数据CSV文件拟合模型")
@click.option("--concurrency", "-n", type=float, help="给定并发")
@click.option("--throughput", "-x", type=float, help="给定吞吐量")
@click.option("--latency", "-r", type=float, help="给定延迟")
@click.option("--format", "-f", default=None, type=click.Choice(FORMAT_CHOICES), help="输出格式")
def predict(sigma: Optional[float], kappa: Optional[float], lambda_: Optional[float],
            dataset: Optional[str], input_file: Optional[str],
            concurrency: Optional[float], throughput: Optional[float], latency: Optional[float],
            format: Optional[str]):
    """给定并发、吞吐量或延迟之一，预测另外两个量

    模型可由 --sigma/--kappa/--lambda 直接指定，也可由 --dataset 或 --input 拟合得到。
    """
    format = format or get_settings().default_output_format

    coefficients = [sigma, kappa, lambda_]
    if any(v is not None for v in coefficients):
        if any(v is None for v in coefficients):
            raise click.BadParameter("--sigma、--kappa、--lambda 必须同时指定")
        if dataset or input_file:
            raise click.BadParameter("不能同时指定模型系数和测量数据")
    if sum(v is not None for v in (concurrency, throughput, latency)) != 1:
        raise click.BadParameter("必须且只能指定 --concurrency、--throughput、--latency 其中之一")

    try:
        estimator = CapacityEstimator()
        if lambda_ is not None:
            model = Model.of(sigma, kappa, lambda_)
        else:
            model = Model.from_fit(estimator.fit(load_measurements(dataset, input_file)))

        result = estimator.predict(model, concurrency=concurrency,
                                   throughput=throughput, latency=latency)
        click.echo(format_prediction(result, format))

    except click.BadParameter:
        raise
    except Exception as e:
        click.echo(f"错误: {e}", err=True)
        raise click.Abort()


@cli.command()
def list_datasets():
    """列出内置数据集"""
    data = []
    for name in dataset_registry.list_datasets():
        info = dataset_registry.get_dataset_info(name)
        data.append([
            name,
            info["points"],
            f"{info['min_concurrency']:g}-{info['max_concurrency']:g}",
            info["description"],
        ])

    headers = ["名称", "测量点", "并发范围", "说明"]
    table = tabulate(data, headers=headers, tablefmt="grid")
    click.echo(table)


def main():
    """主程序入口"""
    configure_logging()
    cli()


if __name__ == "__main__":
    main()

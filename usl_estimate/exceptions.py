"""
异常定义

所有错误都是确定性的输入错误，统一继承自 ValueError。
"""


class USLError(ValueError):
    """USL-Estimate 异常基类"""


class InvalidMeasurement(USLError):
    """测量值非正或非有限"""


class InsufficientData(USLError):
    """拟合时没有提供任何测量值"""


class DegenerateFit(USLError):
    """回归方程组奇异，无法确定系数"""


class UnreachableThroughput(USLError):
    """请求的吞吐量超出模型可达范围"""


class UnreachableLatency(USLError):
    """请求的延迟低于模型可达的最小值"""


class InvalidModel(USLError):
    """模型系数非有限或理想吞吐量非正"""

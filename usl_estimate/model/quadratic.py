"""
二次方程求根

并发↔吞吐量、并发↔延迟的反查都归结为 a*N^2 + b*N + c = 0，
统一取最小正实根，即吞吐量曲线峰值之前的工作点。
"""

import math
from typing import Optional, Tuple


def real_roots(a: float, b: float, c: float) -> Tuple[float, ...]:
    """
    求 a*x^2 + b*x + c = 0 的实根

    a 为 0 时退化为一次方程。使用数值稳定的求根形式，避免 b 与判别式
    平方根相近时的抵消误差。

    Returns:
        升序排列的实根，无实根时为空元组
    """
    if a == 0:
        if b == 0:
            return ()
        return (-c / b,)

    discriminant = b * b - 4 * a * c
    if discriminant < 0:
        return ()

    q = -0.5 * (b + math.copysign(math.sqrt(discriminant), b))
    if q == 0:
        # b == 0 且 c == 0，重根 0
        return (0.0,)
    return tuple(sorted((q / a, c / q)))


def smallest_positive_root(a: float, b: float, c: float) -> Optional[float]:
    """
    求最小正实根

    Args:
        a: 二次项系数
        b: 一次项系数
        c: 常数项

    Returns:
        最小的正实根；不存在时返回 None
    """
    positive = [root for root in real_roots(a, b, c) if root > 0 and math.isfinite(root)]
    if not positive:
        return None
    return min(positive)

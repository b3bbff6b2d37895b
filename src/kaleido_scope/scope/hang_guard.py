"""导出卡死风险估算。

按 trace 类型给每条 trace 一个点数预算，累计 "估算点数 / 预算"：
总和超过 1，或 trace 数超过上限时，认为渲染很可能卡死或耗尽内存。

点数估算以 trace 中最长的数组为代理，一般会低估真实绘制点数
（其他坐标数组长度不一致时）。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from kaleido_scope import constants as cst
from kaleido_scope.utils.validators import is_numeric, is_plain_obj

# 按 trace 类型的最大点数预算
_GL_BUDGET = 10_000_000
_HIGH_BUDGET = 1_000_000
_3D_BUDGET = 500_000
_DEFAULT_BUDGET = 50_000
_MESH_ALPHAHULL_BUDGET = 1_000

_TRACE_BUDGETS: Mapping[str, int] = {
    "scattergl": _GL_BUDGET,
    "splom": _GL_BUDGET,
    "pointcloud": _GL_BUDGET,
    "table": _GL_BUDGET,
    "scatterpolargl": _HIGH_BUDGET,
    "heatmap": _HIGH_BUDGET,
    "heatmapgl": _HIGH_BUDGET,
    "scatter3d": _3D_BUDGET,
    "surface": _3D_BUDGET,
    "parcoords": _3D_BUDGET,
    "scattermapbox": _3D_BUDGET,
    "histogram": _HIGH_BUDGET,
    "histogram2d": _HIGH_BUDGET,
    "histogram2dcontour": _HIGH_BUDGET,
}


@dataclass(frozen=True)
class HangRiskEstimate:
    """风险估算结果。

    stopped_at 为触发阈值的 trace 下标；因 trace 数超限被拒时为 None。
    """

    trace_count: int
    budget_used: float
    likely_to_hang: bool
    stopped_at: Optional[int] = None


def _is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def find_max_array_length(cont: Mapping[str, Any]) -> int:
    """容器中最长数组的长度；二维数组按各行长度求和。"""
    lengths: list[int] = []
    for value in cont.values():
        if not _is_array(value):
            continue
        if value and _is_array(value[0]):
            lengths.append(sum(len(row) if _is_array(row) else 1 for row in value))
        else:
            lengths.append(len(value))
    return max([0, *lengths])


def estimate_data_length(trace: Mapping[str, Any]) -> int:
    """估算单条 trace 的点数。"""
    top_level = find_max_array_length(trace)
    dim_level = 0
    cell_level = 0

    # parcoords / splom 等
    dimensions = trace.get("dimensions")
    if _is_array(dimensions):
        dim_level = sum(find_max_array_length(dim) for dim in dimensions if is_plain_obj(dim))

    # table
    cells = trace.get("cells")
    if is_plain_obj(cells):
        cell_level = find_max_array_length(cells)

    return max(top_level, dim_level, cell_level)


def _alphahull_active(trace: Mapping[str, Any]) -> bool:
    if "alphahull" not in trace:
        return False
    value = trace["alphahull"]
    if value is None:
        return True
    return is_numeric(value) and float(value) >= 0


def max_points_per_trace(trace: Mapping[str, Any]) -> int:
    """按 trace 类型查预算。"""
    trace_type = trace.get("type")
    if not isinstance(trace_type, str) or not trace_type:
        trace_type = "scatter"

    if trace_type == "mesh3d":
        return _MESH_ALPHAHULL_BUDGET if _alphahull_active(trace) else _3D_BUDGET
    if trace_type == "box":
        return _DEFAULT_BUDGET if trace.get("boxpoints") == "all" else _HIGH_BUDGET
    if trace_type == "violin":
        return _DEFAULT_BUDGET if trace.get("points") == "all" else _HIGH_BUDGET
    return _TRACE_BUDGETS.get(trace_type, _DEFAULT_BUDGET)


def estimate_hang_risk(data: Sequence[Any]) -> HangRiskEstimate:
    """按声明顺序累计预算，越过阈值立即停止。"""
    trace_count = len(data)
    if trace_count > cst.MAX_TRACES:
        return HangRiskEstimate(trace_count=trace_count, budget_used=0.0, likely_to_hang=True)

    budget_used = 0.0
    for index, raw in enumerate(data):
        trace = raw if is_plain_obj(raw) else {}
        budget_used += estimate_data_length(trace) / max_points_per_trace(trace)
        if budget_used > 1:
            return HangRiskEstimate(
                trace_count=trace_count,
                budget_used=budget_used,
                likely_to_hang=True,
                stopped_at=index,
            )

    return HangRiskEstimate(
        trace_count=trace_count, budget_used=budget_used, likely_to_hang=False
    )


def will_figure_hang(data: Sequence[Any]) -> bool:
    return estimate_hang_risk(data).likely_to_hang

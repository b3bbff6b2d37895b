"""导出请求解析：校验原始请求并生成规范化请求。"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from kaleido_scope import constants as cst
from kaleido_scope.constants import StatusCode
from kaleido_scope.scope.hang_guard import estimate_hang_risk
from kaleido_scope.scope.models import CanonicalRequest, Figure, ParseResult
from kaleido_scope.utils.validators import (
    is_non_empty_string,
    is_plain_obj,
    is_positive_numeric,
)

logger = logging.getLogger(__name__)


def _error_out(code: int, extra: Optional[str] = None) -> ParseResult:
    message = cst.STATUS_MSG[code]
    if extra:
        message = f"{message} ({extra})"
    return ParseResult(code=code, message=message, result=None)


def _as_number(value: Any) -> int | float:
    """数值化，整数值保持为 int，避免响应里出现 700.0。"""
    number = float(value)
    return int(number) if number.is_integer() else number


def _parse_format(options: Mapping[str, Any]) -> Optional[str]:
    fmt = options.get("format")
    if fmt is None or fmt == "":
        return str(cst.DEFAULTS["format"])
    if isinstance(fmt, str) and fmt in cst.CONTENT_FORMAT:
        return fmt
    return None


def _parse_dim(layout: Mapping[str, Any], options: Mapping[str, Any], dim: str) -> int | float:
    """显式选项 > 非 autosize 时的 layout 取值 > 默认值。"""
    if is_positive_numeric(options.get(dim)):
        return _as_number(options[dim])
    if is_positive_numeric(layout.get(dim)) and not layout.get("autosize"):
        return _as_number(layout[dim])
    return _as_number(cst.DEFAULTS[dim])


def parse(
    body: Any,
    opts: Optional[Mapping[str, Any]] = None,
    *,
    safe_mode: bool = False,
) -> ParseResult:
    """解析导出请求。

    支持两种请求结构：
    - serve 结构：{"figure": {...}, "format": ..., "scale": ..., ...}，选项取自请求本身
    - 简写结构：{"data": [...], "layout": {...}}，选项取自 opts

    Args:
        body: 原始请求（JSON 解析后的对象）
        opts: 简写结构下的导出选项（format / scale / width / height / encoded / fid）
        safe_mode: 是否拒绝估算会卡死导出器的请求

    Returns:
        ParseResult，code 为 0 时 result 为 CanonicalRequest
    """
    if is_plain_obj(body) and body.get("figure"):
        figure = body["figure"]
        options: Mapping[str, Any] = body
    else:
        figure = body
        options = opts if opts is not None else {}

    scale = _as_number(options["scale"]) if is_positive_numeric(options.get("scale")) else (
        _as_number(cst.DEFAULTS["scale"])
    )
    fid = options.get("fid") if is_non_empty_string(options.get("fid")) else None
    encoded = bool(options.get("encoded"))

    fmt = _parse_format(options)
    if fmt is None:
        return _error_out(StatusCode.MALFORMED_REQUEST, "wrong format")

    if not is_plain_obj(figure):
        return _error_out(StatusCode.MALFORMED_REQUEST, "non-object figure")

    if figure.get("data") is None and figure.get("layout") is None:
        return _error_out(StatusCode.MALFORMED_REQUEST, "no 'data' and no 'layout' in figure")

    if "data" in figure:
        raw_data = figure["data"]
        if not isinstance(raw_data, (list, tuple)):
            return _error_out(StatusCode.MALFORMED_REQUEST, "non-array figure data")
        data = tuple(raw_data)
    else:
        data = ()

    if "layout" in figure:
        raw_layout = figure["layout"]
        if not is_plain_obj(raw_layout):
            return _error_out(StatusCode.MALFORMED_REQUEST, "non-object figure layout")
        layout = raw_layout
    else:
        layout = {}

    # config 非普通对象时直接丢弃，不视为错误
    config = figure["config"] if is_plain_obj(figure.get("config")) else None

    width = _parse_dim(layout, options, "width")
    height = _parse_dim(layout, options, "height")

    if safe_mode:
        estimate = estimate_hang_risk(data)
        if estimate.likely_to_hang:
            logger.warning(
                "拒绝导出请求：trace 数=%d，预算占用=%.3f，触发位置=%s，fid=%s",
                estimate.trace_count,
                estimate.budget_used,
                estimate.stopped_at,
                fid,
            )
            return _error_out(
                StatusCode.MALFORMED_REQUEST,
                "figure data is likely to make exporter hang, rejecting request",
            )

    request = CanonicalRequest(
        # 逐层复制为只读结构，与调用方的原始对象脱离
        figure=Figure.from_parts(data, layout, config),
        format=fmt,
        scale=scale,
        width=width,
        height=height,
        encoded=encoded,
        fid=fid,
    )
    return ParseResult(code=StatusCode.OK, message=None, result=request)

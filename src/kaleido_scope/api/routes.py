"""HTTP 端点：serve 模式下的图表导出。"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from kaleido_scope import constants as cst
from kaleido_scope.constants import StatusCode
from kaleido_scope.scope.plotly_scope import PlotlyScope
from kaleido_scope.scope.version_gate import resolve_profile
from kaleido_scope.utils.payload import decode_payload

router = APIRouter()
logger = logging.getLogger(__name__)

_QUERY_OPTIONS = ("format", "scale", "width", "height", "encoded", "fid")


def _get_scope(request: Request) -> PlotlyScope:
    return request.app.state.scope


def _error_response(code: int, message: str, fmt: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=int(code),
        content={"code": int(code), "message": message, "format": fmt, "result": None},
    )


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """引擎版本与能力档位。"""
    version = _get_scope(request).engine.version
    return {"status": "ok", "plotly_version": version, "profile": resolve_profile(version).value}


@router.post("/")
async def export_figure(request: Request) -> Response:
    """导出图表。

    请求体为 {"figure": ..., "format": ...}，或 {"data": ..., "layout": ...} 简写
    （此时导出选项取自查询参数）。成功时返回图像字节；encoded=true 时返回 JSON 响应。
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error_response(
            StatusCode.MALFORMED_REQUEST,
            f"{cst.STATUS_MSG[StatusCode.MALFORMED_REQUEST]} (body is not valid JSON)",
        )

    opts = {key: request.query_params[key] for key in _QUERY_OPTIONS if key in request.query_params}
    if "encoded" in opts:
        opts["encoded"] = opts["encoded"].lower() in ("1", "true", "yes")

    fmt = body.get("format") if isinstance(body, dict) and body.get("figure") else opts.get("format")
    if fmt == "emf":
        # emf 由宿主从 SVG 转换，serve 模式无法完成
        return _error_response(StatusCode.UNACCEPTABLE_FORMAT, cst.STATUS_MSG[406], fmt)

    response = await _get_scope(request).export(body, opts)
    if not response.ok:
        return JSONResponse(status_code=response.code, content=response.to_dict())

    payload = response.to_dict()
    if payload.get("result") is None or _is_encoded(body, opts):
        return JSONResponse(content=payload)

    return Response(
        content=decode_payload(response.result, response.format),
        media_type=cst.content_type_for(response.format),
    )


def _is_encoded(body: Any, opts: dict[str, Any]) -> bool:
    if isinstance(body, dict) and body.get("figure"):
        return bool(body.get("encoded"))
    return bool(opts.get("encoded"))

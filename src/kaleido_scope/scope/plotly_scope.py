"""plotly 导出 scope：宿主作业 → 解析 → 渲染。"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from kaleido_scope import constants as cst
from kaleido_scope.config import settings
from kaleido_scope.constants import StatusCode
from kaleido_scope.scope.interfaces import ChartingEngine, PreviewSurface
from kaleido_scope.scope.models import RenderResult
from kaleido_scope.scope.parse import parse
from kaleido_scope.scope.render import build_config, render

logger = logging.getLogger(__name__)


def _rejection(code: int, message: Optional[str], fmt: Optional[str]) -> RenderResult:
    """解析阶段失败的响应，尺寸字段取默认值；不认识的格式回落为默认格式。"""
    if fmt not in cst.CONTENT_FORMAT:
        fmt = str(cst.DEFAULTS["format"])
    return RenderResult(
        code=code,
        message=message,
        format=fmt,
        result=None,
        width=cst.DEFAULTS["width"],
        height=cst.DEFAULTS["height"],
        scale=cst.DEFAULTS["scale"],
    )


class PlotlyScope:
    """绑定一个图表引擎（及可选预览面）的导出入口。

    宿主作业结构：{"format", "width", "height", "scale", "encoded"?, "data": <figure>}，
    其中 data 承载整个 figure，解析前改名为 figure。
    """

    name = "plotly"

    def __init__(
        self,
        engine: ChartingEngine,
        surface: Optional[PreviewSurface] = None,
        *,
        mapbox_access_token: Optional[str] = None,
        topojson_url: Optional[str] = None,
        plot_gl_pixel_ratio: Optional[float] = None,
        safe_mode: Optional[bool] = None,
        page_load_timeout: Optional[float] = None,
    ) -> None:
        self.engine = engine
        self.surface = surface
        self.mapbox_access_token = mapbox_access_token or settings.mapbox_access_token
        self.topojson_url = topojson_url or settings.topojson_url
        self.plot_gl_pixel_ratio = plot_gl_pixel_ratio or settings.plot_gl_pixel_ratio
        self.safe_mode = settings.safe_mode if safe_mode is None else safe_mode
        self.page_load_timeout = (
            settings.pdf_page_load_timeout if page_load_timeout is None else page_load_timeout
        )

    def config_defaults(self) -> dict[str, Any]:
        return build_config(
            mapbox_access_token=self.mapbox_access_token,
            topojson_url=self.topojson_url,
            plot_gl_pixel_ratio=self.plot_gl_pixel_ratio,
        )

    async def export(
        self,
        body: Mapping[str, Any],
        opts: Optional[Mapping[str, Any]] = None,
    ) -> RenderResult:
        """解析并渲染一次导出请求，永不抛出异常。"""
        parsed = parse(body, opts, safe_mode=self.safe_mode)
        if not parsed.ok or parsed.result is None:
            logger.info("导出请求被拒绝: %s", parsed.message)
            options = body if isinstance(body, Mapping) and body.get("figure") else (opts or {})
            fmt = options.get("format") if isinstance(options.get("format"), str) else None
            return _rejection(parsed.code, parsed.message, fmt)

        return await render(
            parsed.result,
            self.engine,
            self.surface,
            config_defaults=self.config_defaults(),
            page_load_timeout=self.page_load_timeout,
        )

    async def export_job(self, job: Mapping[str, Any]) -> RenderResult:
        """处理宿主下发的作业：data 字段承载 figure。"""
        info = dict(job)
        if "data" in info:
            info["figure"] = info.pop("data")
        if not info.get("figure"):
            message = f"{cst.STATUS_MSG[StatusCode.MALFORMED_REQUEST]} (no figure in job)"
            fmt = info.get("format") if isinstance(info.get("format"), str) else None
            return _rejection(StatusCode.MALFORMED_REQUEST, message, fmt)
        return await self.export(info)

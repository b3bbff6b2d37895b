"""基于 plotly.py + kaleido 的图表引擎实现。

plotly.py 自带较新的 plotly.js，只走直接出图路径；出图调用会阻塞，
放到线程池中执行。
"""

from __future__ import annotations

import asyncio
import base64
import copy
import logging
from typing import Any, Optional
from urllib.parse import quote

from kaleido_scope import constants as cst
from kaleido_scope.scope.interfaces import ChartingEngine
from kaleido_scope.scope.models import BackgroundMode, ImageOptions

logger = logging.getLogger(__name__)

# plotly.js 的默认 paper_bgcolor
_DEFAULT_PAPER_BGCOLOR = "#fff"
_TRANSPARENT_COLORS = {"transparent", "rgba(0,0,0,0)", "rgba(0, 0, 0, 0)"}


def bundled_plotlyjs_version() -> str:
    from plotly.offline import get_plotlyjs_version

    return get_plotlyjs_version()


def resolve_paper_bgcolor(layout: dict[str, Any]) -> str:
    """layout 未显式给出 paper_bgcolor 时，按模板（含默认模板）解析实际背景色。"""
    explicit = layout.get("paper_bgcolor")
    if explicit:
        return str(explicit)

    import plotly.graph_objects as go
    import plotly.io as pio

    template = layout.get("template", pio.templates.default)
    try:
        if isinstance(template, str):
            resolved = pio.templates[template]
        elif isinstance(template, dict):
            resolved = go.layout.Template(template)
        else:
            return _DEFAULT_PAPER_BGCOLOR
        color = resolved.layout.paper_bgcolor
    except (KeyError, ValueError) as exc:
        logger.debug("无法解析模板背景色，使用默认值: %s", exc)
        return _DEFAULT_PAPER_BGCOLOR
    return str(color) if color else _DEFAULT_PAPER_BGCOLOR


class PlotlyEngine(ChartingEngine):
    """通过 plotly.io 调用 kaleido 出图。"""

    def __init__(self, version: Optional[str] = None) -> None:
        self._version = version

    @property
    def version(self) -> str:
        if self._version is None:
            self._version = bundled_plotlyjs_version()
        return self._version

    async def to_image(self, figure: dict[str, Any], options: ImageOptions) -> str:
        return await asyncio.to_thread(self._to_image_sync, figure, options)

    def _to_image_sync(self, figure: dict[str, Any], options: ImageOptions) -> str:
        import plotly.io as pio

        fig = self._prepare_figure(figure, options)

        if options.format == cst.FULL_JSON_TOKEN:
            full = pio.full_figure_for_development(fig, warn=False)
            return full.to_json()

        raw = pio.to_image(
            fig,
            format=options.format,
            width=options.width,
            height=options.height,
            scale=options.scale,
            validate=False,
        )

        if options.format == "svg":
            svg = raw.decode("utf-8")
            if options.image_data_only:
                return svg
            return f"data:image/svg+xml,{quote(svg)}"

        encoded = base64.b64encode(raw).decode("ascii")
        if options.image_data_only:
            return encoded
        return f"data:image/{options.format};base64,{encoded}"

    def _prepare_figure(self, figure: dict[str, Any], options: ImageOptions) -> dict[str, Any]:
        """按背景处理方式调整 layout；mapbox token 写入 layout.mapbox。"""
        layout = copy.deepcopy(figure.get("layout") or {})
        config = figure.get("config") or {}

        token = config.get("mapboxAccessToken")
        if token:
            mapbox = layout.setdefault("mapbox", {})
            if isinstance(mapbox, dict):
                mapbox.setdefault("accesstoken", token)

        bgcolor = resolve_paper_bgcolor(layout)
        if options.set_background is BackgroundMode.OPAQUE:
            if str(bgcolor).replace(" ", "").lower() in _TRANSPARENT_COLORS:
                layout["paper_bgcolor"] = _DEFAULT_PAPER_BGCOLOR
        elif options.set_background is BackgroundMode.CAPTURE:
            if options.on_background is not None:
                options.on_background(str(bgcolor))
            layout["paper_bgcolor"] = "rgba(0,0,0,0)"

        return {"data": list(figure.get("data") or []), "layout": layout}

"""渲染桥：按引擎能力档位调用 plotly.js 出图，并做格式相关的后处理。

文档格式（pdf/eps）的状态流转：
    Idle → AwaitingEngineImage → AwaitingSurfaceLoad → Done | Failed(timeout) | Failed(loadError)
其他格式：
    Idle → AwaitingEngineImage → Done | Failed

任何失败都终止本次请求，不做内部重试。
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional

from kaleido_scope import constants as cst
from kaleido_scope.constants import StatusCode
from kaleido_scope.scope.errors import DocumentLoadError, ScopeError
from kaleido_scope.scope.interfaces import ChartingEngine, PreviewSurface
from kaleido_scope.scope.models import (
    BackgroundMode,
    CanonicalRequest,
    ImageOptions,
    RenderResult,
)
from kaleido_scope.scope.version_gate import CapabilityProfile, resolve_profile
from kaleido_scope.utils.payload import decode_svg

logger = logging.getLogger(__name__)


class _BackgroundCapture:
    """记录引擎回传的 paper_bgcolor，仅保留第一次的值。"""

    def __init__(self) -> None:
        self.color: Optional[str] = None

    def __call__(self, color: str) -> None:
        if self.color is None:
            self.color = color


def engine_format_token(fmt: str) -> str:
    """导出格式 → 引擎出图格式。

    文档格式与 emf 都先让引擎输出 SVG，由下游自行转换。
    """
    if fmt in cst.HOST_CONVERTED_FORMATS:
        return "svg"
    if fmt == "json":
        return cst.FULL_JSON_TOKEN
    return fmt


def build_image_options(
    request: CanonicalRequest,
    on_background: Optional[_BackgroundCapture] = None,
) -> ImageOptions:
    fmt = request.format
    print_to_pdf = fmt in cst.DOCUMENT_FORMATS
    print_to_emf = fmt == "emf"

    if fmt in ("jpeg", "emf"):
        set_background = BackgroundMode.OPAQUE
    elif print_to_pdf:
        set_background = BackgroundMode.CAPTURE
    else:
        set_background = BackgroundMode.NONE

    return ImageOptions(
        format=engine_format_token(fmt),
        width=request.width,
        height=request.height,
        scale=request.scale,
        # 返回不带 'data:image' 前缀的图像数据
        image_data_only=print_to_emf or (not print_to_pdf and not request.encoded),
        set_background=set_background,
        on_background=on_background if set_background is BackgroundMode.CAPTURE else None,
    )


def build_config(
    *,
    mapbox_access_token: Optional[str] = None,
    topojson_url: Optional[str] = None,
    plot_gl_pixel_ratio: Optional[float] = None,
) -> dict[str, Any]:
    """构造引擎默认 config，渲染时由 figure.config 逐项覆盖。"""
    config: dict[str, Any] = {
        "mapboxAccessToken": mapbox_access_token or None,
        "plotGlPixelRatio": plot_gl_pixel_ratio or cst.PLOT_GL_PIXEL_RATIO,
    }
    if topojson_url:
        config["topojsonURL"] = topojson_url
    return config


def _strip_legacy_payload(img_data: str, fmt: str, encoded: bool) -> str:
    """旧版引擎不支持 imageDataOnly，需自行剥离 data URI 前缀。"""
    if fmt in ("png", "jpeg", "webp"):
        return img_data if encoded else cst.IMG_PREFIX["base64"].sub("", img_data, count=1)
    if fmt == "svg":
        return img_data if encoded else decode_svg(img_data)
    return img_data


def _format_px(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def page_style(width: float, height: float, scale: float, bg_color: Optional[str]) -> str:
    """预览页的页面尺寸与背景色样式。"""
    return (
        f"\n@page {{ size: {_format_px(width * scale)}px {_format_px(height * scale)}px; }}\n"
        f"body {{ margin: 0; padding: 0; background-color: {bg_color or 'transparent'} }}\n"
    )


async def _render_mounted(
    engine: ChartingEngine,
    request: CanonicalRequest,
    config: dict[str, Any],
    options: ImageOptions,
) -> str:
    element = engine.create_element()
    try:
        figure = request.figure.to_dict()
        await engine.new_plot(element, figure["data"], figure["layout"], config)
        img_data = await engine.element_to_image(element, options)
    finally:
        engine.purge(element)
    return _strip_legacy_payload(img_data, request.format, request.encoded)


async def wait_for_surface_load(
    surface: PreviewSurface,
    src: str,
    css: str,
    timeout: float,
) -> None:
    """在预览面上加载资源，等待 load / error 信号或超时，先到者为准。

    返回前总会解除信号挂接，超时计时器随 wait_for 一并取消。
    """
    loop = asyncio.get_running_loop()
    loaded: asyncio.Future[None] = loop.create_future()

    def _on_load() -> None:
        if not loaded.done():
            loaded.set_result(None)

    def _on_error(reason: Optional[str] = None) -> None:
        if not loaded.done():
            loaded.set_exception(DocumentLoadError(reason or "failed to load image"))

    surface.set_page_style(css)
    surface.connect(_on_load, _on_error)
    try:
        surface.set_source(src)
        await asyncio.wait_for(loaded, timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise DocumentLoadError("too long to load image") from exc
    finally:
        surface.disconnect()


async def render(
    request: CanonicalRequest,
    engine: ChartingEngine,
    surface: Optional[PreviewSurface] = None,
    *,
    config_defaults: Optional[Mapping[str, Any]] = None,
    page_load_timeout: float = cst.PDF_PAGE_LOAD_IMG_TIMEOUT,
) -> RenderResult:
    """渲染规范化请求，所有失败都转换为带状态码的 RenderResult。"""
    fmt = request.format
    print_to_pdf = fmt in cst.DOCUMENT_FORMATS

    response = RenderResult(
        code=StatusCode.OK,
        message=None,
        format=fmt,
        result=None,
        width=request.width,
        height=request.height,
        scale=request.scale,
    )

    def _fail(code: int, message: Optional[str] = None) -> RenderResult:
        return response.model_copy(
            update={"code": int(code), "message": message or cst.STATUS_MSG[code], "result": None}
        )

    version = engine.version
    profile = resolve_profile(version)
    if not profile.can_render:
        logger.warning("plotly.js 版本过低，拒绝导出: %s", version)
        return _fail(StatusCode.UNSUPPORTED_ENGINE_VERSION, f"plotly.js version: {version}")

    capture = _BackgroundCapture()
    options = build_image_options(request, on_background=capture)

    if options.format == cst.FULL_JSON_TOKEN and not profile.supports_full_json:
        logger.warning("plotly.js %s 不支持 full-json 导出", version)
        return _fail(StatusCode.UNSUPPORTED_FORMAT_FOR_VERSION, f"plotly.js version: {version}")

    if print_to_pdf and surface is None:
        return _fail(StatusCode.UNACCEPTABLE_FORMAT, f"no preview surface to print `{fmt}`")

    config = dict(config_defaults) if config_defaults is not None else build_config()
    if request.figure.config:
        config.update(request.figure.config_dict())

    try:
        if profile is CapabilityProfile.LEGACY_MOUNT:
            img_data = await _render_mounted(engine, request, config, options)
        else:
            figure = {**request.figure.to_dict(), "config": config}
            img_data = await engine.to_image(figure, options)

        response = response.model_copy(update={"result": img_data})

        if print_to_pdf and surface is not None:
            css = page_style(request.width, request.height, request.scale, capture.color)
            await wait_for_surface_load(surface, img_data, css, page_load_timeout)
            # 宿主直接从预览面打印页面，无需回传图像字节
            response = response.model_copy(
                update={"result": None, "pdf_bg_color": capture.color}
            )
    except ScopeError as exc:
        logger.warning("导出失败（%s）: %s", exc.code, exc)
        return _fail(exc.code, str(exc))
    except Exception as exc:
        logger.warning("plotly.js 出图失败: %s", exc)
        return _fail(StatusCode.ENGINE_ERROR, str(exc) or type(exc).__name__)

    logger.debug(
        "导出完成：format=%s，尺寸=%sx%s scale=%s，档位=%s",
        fmt,
        request.width,
        request.height,
        request.scale,
        profile.value,
    )
    return response

"""导出相关静态常量表。

所有组件共享只读数据，运行期不可修改。
"""

from __future__ import annotations

import re
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping


class StatusCode(IntEnum):
    """稳定响应契约中的状态码。"""

    OK = 0
    MALFORMED_REQUEST = 400
    UNACCEPTABLE_FORMAT = 406
    ENGINE_ERROR = 525
    UNSUPPORTED_ENGINE_VERSION = 526
    UNSUPPORTED_FORMAT_FOR_VERSION = 527
    CONVERSION_ERROR = 530


CONTENT_FORMAT: Mapping[str, str] = MappingProxyType(
    {
        "png": "image/png",
        "jpeg": "image/jpeg",
        "webp": "image/webp",
        "svg": "image/svg+xml",
        "pdf": "application/pdf",
        "eps": "application/postscript",
        "emf": "image/emf",
        "json": "application/json",
    }
)

STATUS_MSG: Mapping[int, str] = MappingProxyType(
    {
        StatusCode.MALFORMED_REQUEST: "invalid or malformed request syntax",
        StatusCode.UNACCEPTABLE_FORMAT: "requested format is not acceptable",
        StatusCode.ENGINE_ERROR: "plotly.js error",
        StatusCode.UNSUPPORTED_ENGINE_VERSION: "plotly.js version 1.11.0 or up required",
        StatusCode.UNSUPPORTED_FORMAT_FOR_VERSION: (
            "plotly.js version 1.53.0 or up required for exporting to `json`"
        ),
        StatusCode.CONVERSION_ERROR: "image conversion error",
    }
)

DEFAULTS: Mapping[str, object] = MappingProxyType(
    {
        "format": "png",
        "scale": 1,
        "width": 700,
        "height": 500,
    }
)

# data URI 前缀：旧版挂载路径剥离载荷，以及解码传输载荷
IMG_PREFIX: Mapping[str, re.Pattern[str]] = MappingProxyType(
    {
        "base64": re.compile(r"^data:image/\w+;base64,"),
        "svg": re.compile(r"^data:image/svg\+xml,"),
    }
)

# 渲染时传给引擎的 WebGL 像素比
PLOT_GL_PIXEL_RATIO = 2.5

# 文档格式等待预览面加载的超时（秒）
PDF_PAGE_LOAD_IMG_TIMEOUT = 2.0

MAX_TRACES = 200

# 需要预览面合成页面的文档格式
DOCUMENT_FORMATS = frozenset({"pdf", "eps"})

# 引擎只产出 SVG、由宿主再转换的格式
HOST_CONVERTED_FORMATS = frozenset({"pdf", "eps", "emf"})

FULL_JSON_TOKEN = "full-json"

_ACCEPT_HEADER: Mapping[str, str] = MappingProxyType(
    {mime: fmt for fmt, mime in CONTENT_FORMAT.items()}
)


def content_type_for(fmt: str) -> str | None:
    """导出格式对应的 MIME 类型。"""
    return CONTENT_FORMAT.get(fmt)


def format_for_content_type(content_type: str | None) -> str | None:
    """按 MIME 类型反查导出格式，忽略参数部分（如 charset）。"""
    if not content_type:
        return None
    mime = content_type.split(";", 1)[0].strip().lower()
    return _ACCEPT_HEADER.get(mime)

"""渲染结果载荷编解码。"""

from __future__ import annotations

import base64
from urllib.parse import unquote

from kaleido_scope import constants as cst

_TEXT_FORMATS = {"svg", "json", "emf"}


def decode_svg(img_data: str) -> str:
    """剥离 'data:image/svg+xml,' 前缀并做百分号解码。"""
    return unquote(cst.IMG_PREFIX["svg"].sub("", img_data, count=1))


def decode_payload(result: str, fmt: str) -> bytes:
    """把 RenderResult.result 还原为文件字节。

    svg / json（以及交给宿主转换的 emf SVG）为文本，其余为 base64；
    带 data URI 前缀的载荷先剥离前缀。
    """
    if fmt in _TEXT_FORMATS:
        if cst.IMG_PREFIX["svg"].match(result):
            return decode_svg(result).encode("utf-8")
        return result.encode("utf-8")
    return base64.b64decode(cst.IMG_PREFIX["base64"].sub("", result, count=1))

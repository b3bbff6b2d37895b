"""导出流程内部异常，均在 render 边界转换为响应状态码。"""

from __future__ import annotations

from kaleido_scope.constants import StatusCode


class ScopeError(RuntimeError):
    """带状态码的导出错误。"""

    code: int = StatusCode.ENGINE_ERROR


class DocumentLoadError(ScopeError):
    """文档格式在预览面上加载失败或超时。"""

    code = StatusCode.CONVERSION_ERROR

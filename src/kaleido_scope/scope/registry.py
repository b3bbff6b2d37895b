"""导出 scope 注册表。"""

from __future__ import annotations

from typing import Any

from kaleido_scope.scope.plotly_scope import PlotlyScope

_SCOPES: dict[str, type[PlotlyScope]] = {
    PlotlyScope.name: PlotlyScope,
}


def list_scopes() -> list[str]:
    return sorted(_SCOPES)


def create_scope(name: str, *args: Any, **kwargs: Any) -> PlotlyScope:
    """按名称创建 scope 实例。"""
    try:
        scope_cls = _SCOPES[name]
    except KeyError:
        raise ValueError(f"未知的导出 scope: {name}（可用: {', '.join(list_scopes())}）") from None
    return scope_cls(*args, **kwargs)

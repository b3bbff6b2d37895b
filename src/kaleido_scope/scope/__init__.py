"""导出请求管线：解析、版本门控与渲染桥。"""

from kaleido_scope.scope.errors import DocumentLoadError, ScopeError
from kaleido_scope.scope.hang_guard import HangRiskEstimate, estimate_hang_risk, will_figure_hang
from kaleido_scope.scope.interfaces import ChartingEngine, PreviewSurface
from kaleido_scope.scope.models import (
    BackgroundMode,
    CanonicalRequest,
    Figure,
    ImageOptions,
    ParseResult,
    RenderResult,
)
from kaleido_scope.scope.parse import parse
from kaleido_scope.scope.plotly_scope import PlotlyScope
from kaleido_scope.scope.registry import create_scope, list_scopes
from kaleido_scope.scope.render import render
from kaleido_scope.scope.version_gate import CapabilityProfile, resolve_profile

__all__ = [
    "BackgroundMode",
    "CanonicalRequest",
    "CapabilityProfile",
    "ChartingEngine",
    "DocumentLoadError",
    "Figure",
    "HangRiskEstimate",
    "ImageOptions",
    "ParseResult",
    "PlotlyScope",
    "PreviewSurface",
    "RenderResult",
    "ScopeError",
    "create_scope",
    "estimate_hang_risk",
    "list_scopes",
    "parse",
    "render",
    "resolve_profile",
    "will_figure_hang",
]

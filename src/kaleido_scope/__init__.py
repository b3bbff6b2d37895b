"""kaleido-scope：图表导出请求校验与渲染编排桥。"""

from kaleido_scope.scope import (
    CanonicalRequest,
    CapabilityProfile,
    PlotlyScope,
    RenderResult,
    parse,
    render,
    resolve_profile,
)

__version__ = "0.1.0"

__all__ = [
    "CanonicalRequest",
    "CapabilityProfile",
    "PlotlyScope",
    "RenderResult",
    "parse",
    "render",
    "resolve_profile",
    "__version__",
]

"""图表引擎实现。"""

from kaleido_scope.engines.plotly_engine import PlotlyEngine

__all__ = ["PlotlyEngine"]

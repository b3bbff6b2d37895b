"""渲染桥依赖的外部协作者接口。

图表引擎与预览面都由宿主提供，这里只声明渲染桥实际调用的操作。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from kaleido_scope.scope.models import ImageOptions


class ChartingEngine(ABC):
    """图表引擎（plotly.js）。"""

    @property
    @abstractmethod
    def version(self) -> str:
        """引擎上报的版本号。"""
        ...

    @abstractmethod
    async def to_image(self, figure: dict[str, Any], options: ImageOptions) -> str:
        """直接由 {data, layout, config} 出图（plotly.js >= 1.30.0）。"""
        ...

    # ---- 旧版挂载路径（1.11.0 <= 版本 < 1.30.0） ----

    def create_element(self) -> Any:
        """创建临时绘图元素。"""
        raise NotImplementedError(f"{type(self).__name__} 不支持挂载路径")

    async def new_plot(
        self,
        element: Any,
        data: list[dict[str, Any]],
        layout: dict[str, Any],
        config: dict[str, Any],
    ) -> None:
        """在临时元素上绘图。"""
        raise NotImplementedError(f"{type(self).__name__} 不支持挂载路径")

    async def element_to_image(self, element: Any, options: ImageOptions) -> str:
        """从已绘制的元素出图。"""
        raise NotImplementedError(f"{type(self).__name__} 不支持挂载路径")

    def purge(self, element: Any) -> None:
        """释放临时元素。"""
        raise NotImplementedError(f"{type(self).__name__} 不支持挂载路径")


class PreviewSurface(ABC):
    """宿主的预览面（<img> 元素及其伴随的 <style> 元素）。

    load / error 回调须在事件循环线程中触发。
    """

    @abstractmethod
    def set_page_style(self, css: str) -> None:
        """写入伴随样式元素的内容。"""
        ...

    @abstractmethod
    def connect(
        self,
        on_load: Callable[[], None],
        on_error: Callable[[Optional[str]], None],
    ) -> None:
        """挂接 load / error 信号。"""
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """解除已挂接的信号。"""
        ...

    @abstractmethod
    def set_source(self, src: str) -> None:
        """设置要加载的资源。"""
        ...

"""导出请求与响应的数据模型。"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


def freeze(value: Any) -> Any:
    """递归转为只读结构：dict → MappingProxyType，list → tuple。"""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """freeze 的逆操作，得到可交给引擎修改的普通 dict / list。"""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(item) for item in value]
    return value


@dataclass(frozen=True)
class Figure:
    """图表描述：trace 序列 + layout 记录（+ 可选 config），构造后整体只读。"""

    data: tuple[Mapping[str, Any], ...] = ()
    layout: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    config: Optional[Mapping[str, Any]] = None

    @classmethod
    def from_parts(
        cls,
        data: Any,
        layout: Mapping[str, Any],
        config: Optional[Mapping[str, Any]] = None,
    ) -> Figure:
        return cls(
            data=freeze(data),
            layout=freeze(layout),
            config=freeze(config) if config is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """转换为引擎可接受的 {data, layout} 结构（新的可变副本）。"""
        return {"data": thaw(self.data), "layout": thaw(self.layout)}

    def config_dict(self) -> Optional[dict[str, Any]]:
        return thaw(self.config) if self.config is not None else None


@dataclass(frozen=True)
class CanonicalRequest:
    """校验并补全默认值后的导出请求。"""

    figure: Figure
    format: str
    scale: Union[int, float]
    width: Union[int, float]
    height: Union[int, float]
    encoded: bool = False
    fid: Optional[str] = None


@dataclass(frozen=True)
class ParseResult:
    """解析结果：code 为 0 时 result 为规范化请求，否则为 None。"""

    code: int
    message: Optional[str] = None
    result: Optional[CanonicalRequest] = None

    @property
    def ok(self) -> bool:
        return self.code == 0


class BackgroundMode(str, Enum):
    """引擎出图时的背景处理方式。"""

    NONE = ""
    # jpeg/emf 不支持透明，混合为不透明背景
    OPAQUE = "opaque"
    # 文档格式：记录 paper_bgcolor 并置为透明，由页面样式补回
    CAPTURE = "capture"


@dataclass(frozen=True)
class ImageOptions:
    """传给引擎 toImage 的选项。"""

    format: str
    width: Union[int, float]
    height: Union[int, float]
    scale: Union[int, float]
    image_data_only: bool
    set_background: BackgroundMode = BackgroundMode.NONE
    # 仅 CAPTURE 模式下由引擎回调，参数为原背景色
    on_background: Optional[Callable[[str], None]] = None


class RenderResult(BaseModel):
    """渲染响应，对应宿主侧稳定的 JSON 契约。"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    code: int = 0
    message: Optional[str] = None
    pdf_bg_color: Optional[str] = Field(default=None, alias="pdfBgColor")
    format: str
    result: Optional[str] = None
    width: Union[int, float]
    height: Union[int, float]
    scale: Union[int, float]

    @property
    def ok(self) -> bool:
        return self.code == 0

    def to_dict(self) -> dict[str, Any]:
        """转换为可序列化的字典；pdfBgColor 仅在文档路径出现。"""
        payload = self.model_dump(by_alias=True)
        if payload.get("pdfBgColor") is None:
            payload.pop("pdfBgColor", None)
        return payload

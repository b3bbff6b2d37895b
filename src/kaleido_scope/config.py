"""应用配置，基于 Pydantic Settings。"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from kaleido_scope import constants as cst


def _get_project_root() -> Path:
    """项目根目录（pyproject.toml 所在位置）。"""
    return Path(__file__).resolve().parent.parent.parent


_ROOT = _get_project_root()


class Settings(BaseSettings):
    """全局配置，支持 .env 文件和环境变量。"""

    model_config = SettingsConfigDict(
        env_file=str(_ROOT / ".env"),
        env_file_encoding="utf-8",
        env_prefix="KALEIDO_SCOPE_",
        extra="ignore",
    )

    # ---- 基础 ----
    app_name: str = "kaleido-scope"
    debug: bool = False

    # ---- 请求解析 ----
    # 开启后按数据规模估算渲染风险，拒绝可能卡死导出器的请求
    safe_mode: bool = False

    # ---- 引擎默认配置（figure.config 可逐项覆盖） ----
    mapbox_access_token: Optional[str] = None
    topojson_url: Optional[str] = None
    plot_gl_pixel_ratio: float = cst.PLOT_GL_PIXEL_RATIO

    # ---- 文档格式（pdf/eps） ----
    pdf_page_load_timeout: float = cst.PDF_PAGE_LOAD_IMG_TIMEOUT  # 秒

    # ---- serve 模式 ----
    host: str = "127.0.0.1"
    port: int = 9091


# 全局单例
settings = Settings()

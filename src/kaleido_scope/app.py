"""FastAPI 应用工厂（serve 模式）。"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from kaleido_scope import __version__
from kaleido_scope.config import settings
from kaleido_scope.scope.plotly_scope import PlotlyScope

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期：启动/关闭时执行。"""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    scope: PlotlyScope = app.state.scope
    logger.info("%s 启动完成，plotly.js %s", settings.app_name, scope.engine.version)

    yield

    logger.info("%s 关闭中 ...", settings.app_name)


def create_app(scope: Optional[PlotlyScope] = None) -> FastAPI:
    """创建 FastAPI 应用实例；未指定 scope 时使用 plotly.py 自带引擎。"""
    if scope is None:
        from kaleido_scope.engines import PlotlyEngine

        scope = PlotlyScope(PlotlyEngine())

    app = FastAPI(
        title="kaleido-scope - 图表导出服务",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.scope = scope

    from kaleido_scope.api.routes import router

    app.include_router(router)
    return app

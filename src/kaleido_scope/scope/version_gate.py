"""plotly.js 版本门控：把引擎版本解析为能力档位。

渲染逻辑只根据档位分派，不再直接比较版本字符串。
"""

from __future__ import annotations

import logging
from enum import Enum

from packaging.version import InvalidVersion, Version

logger = logging.getLogger(__name__)

MIN_SUPPORTED_VERSION = "1.11.0"
# 自 1.30.0 起 toImage 可直接接收 figure，无需先挂载
DIRECT_TO_IMAGE_VERSION = "1.30.0"
# 'full-json' 导出自 1.53.0 引入
FULL_JSON_VERSION = "1.53.0"


def version_gte(version: str, minimum: str) -> bool:
    return Version(version) >= Version(minimum)


def version_lt(version: str, minimum: str) -> bool:
    return Version(version) < Version(minimum)


class CapabilityProfile(str, Enum):
    """引擎能力档位。"""

    UNSUPPORTED = "unsupported"
    LEGACY_MOUNT = "legacy-mount"
    DIRECT = "direct"
    FULL_DATA = "full-data"

    @property
    def can_render(self) -> bool:
        return self is not CapabilityProfile.UNSUPPORTED

    @property
    def mounts_element(self) -> bool:
        """是否需要先挂载临时元素再出图。"""
        return self is CapabilityProfile.LEGACY_MOUNT

    @property
    def supports_full_json(self) -> bool:
        return self is CapabilityProfile.FULL_DATA


def resolve_profile(version: str) -> CapabilityProfile:
    """解析引擎上报的版本号；无法解析时视为不支持。"""
    try:
        if version_lt(version, MIN_SUPPORTED_VERSION):
            return CapabilityProfile.UNSUPPORTED
        if version_lt(version, DIRECT_TO_IMAGE_VERSION):
            return CapabilityProfile.LEGACY_MOUNT
        if version_lt(version, FULL_JSON_VERSION):
            return CapabilityProfile.DIRECT
        return CapabilityProfile.FULL_DATA
    except (InvalidVersion, TypeError):
        logger.warning("无法解析 plotly.js 版本号: %r", version)
        return CapabilityProfile.UNSUPPORTED

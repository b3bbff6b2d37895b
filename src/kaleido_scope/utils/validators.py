"""基础校验谓词。"""

from __future__ import annotations

import math
import numbers
from typing import Any


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 0


def is_numeric(value: Any) -> bool:
    """判断是否为有限数值；非空白的数字字符串也视为数值。"""
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        if not value.strip():
            return False
        try:
            value = float(value)
        except ValueError:
            return False
    elif not isinstance(value, numbers.Real):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # 超出浮点范围的大整数
        return False


def is_positive_numeric(value: Any) -> bool:
    return is_numeric(value) and float(value) > 0


def is_plain_obj(value: Any) -> bool:
    """是否为普通键值记录（JSON 对象），排除列表、None 与自定义类实例。"""
    return type(value) is dict

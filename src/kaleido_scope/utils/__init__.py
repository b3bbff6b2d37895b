"""通用工具。"""

from kaleido_scope.utils.payload import decode_payload, decode_svg
from kaleido_scope.utils.validators import (
    is_non_empty_string,
    is_numeric,
    is_plain_obj,
    is_positive_numeric,
)

__all__ = [
    "decode_payload",
    "decode_svg",
    "is_non_empty_string",
    "is_numeric",
    "is_plain_obj",
    "is_positive_numeric",
]

"""
传输请求校验 - 必填字段存在性与类型检查
"""
from typing import Any, Mapping

from domain.common.exceptions import RequestValidationException


# 校验顺序固定：缺失多个字段时只报告第一个
REQUIRED_FIELDS = ("bucketName", "host", "fileName")


def _is_non_empty_string(payload: Mapping[str, Any], name: str) -> bool:
    value = payload.get(name)
    return isinstance(value, str) and len(value) > 0


def validate_transfer_payload(payload: Any) -> None:
    """
    校验原始请求体

    Args:
        payload: 解析后的请求体（期望为 JSON 对象）

    Raises:
        RequestValidationException: 请求体为空，或某个必填字段缺失/非字符串/为空
    """
    if payload is None or not isinstance(payload, Mapping):
        raise RequestValidationException("Body required")

    for name in REQUIRED_FIELDS:
        if not _is_non_empty_string(payload, name):
            raise RequestValidationException(
                f"Required property: {name} not found",
                field=name,
            )

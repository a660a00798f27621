"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
        status_hint: Optional[int] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        # 可选的HTTP状态提示，仅在映射表允许覆盖时生效
        self.status_hint = status_hint
        super().__init__(self.message)


class InvalidMethodException(BusinessException):
    def __init__(self, method: Optional[str] = None):
        details = {"method": method} if method else None
        super().__init__(
            code=BusinessCode.METHOD_NOT_ALLOWED,
            message="Only POST requests are accepted.",
            error_type="InvalidMethod",
            details=details,
        )


class RequestValidationException(BusinessException):
    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(
            code=BusinessCode.PARAM_MISSING,
            message=message,
            error_type="ValidationError",
            details={"field": field} if field else None,
            field=field,
        )


class RemoteFileNotFoundException(BusinessException):
    def __init__(self, file_name: str, *, remote_code: Optional[int] = None):
        details = {"file_name": file_name}
        if remote_code is not None:
            details["remote_code"] = remote_code
        super().__init__(
            code=BusinessCode.REMOTE_FILE_NOT_FOUND,
            message=f"Remote file not found: {file_name}",
            error_type="NotFound",
            details=details,
        )


class RemoteUnauthorizedException(BusinessException):
    def __init__(self, host: str, *, remote_code: Optional[int] = None):
        details = {"host": host}
        if remote_code is not None:
            details["remote_code"] = remote_code
        super().__init__(
            code=BusinessCode.REMOTE_UNAUTHORIZED,
            message=f"Credentials rejected by {host}",
            error_type="Unauthorized",
            details=details,
        )


class TransferException(BusinessException):
    def __init__(self, message: str, *, remote_code: Optional[int] = None):
        details = {"remote_code": remote_code} if remote_code is not None else None
        super().__init__(
            code=BusinessCode.TRANSFER_ERROR,
            message=message,
            error_type="TransferError",
            details=details,
        )
        self.remote_code = remote_code


class StorageWriteException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        bucket: Optional[str] = None,
        key: Optional[str] = None,
        status_hint: Optional[int] = None,
    ):
        details = {}
        if bucket is not None:
            details["bucket"] = bucket
        if key is not None:
            details["key"] = key
        super().__init__(
            code=BusinessCode.STORAGE_ERROR,
            message=message,
            error_type="StorageError",
            details=details or None,
            status_hint=status_hint,
        )

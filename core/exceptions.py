"""
自定义异常映射与全局异常处理器
"""
from typing import Iterable, Optional
from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import traceback
import uuid
from starlette import status as http_status

from .response import error_response
from shared.codes import BusinessCode
from core.logging_config import get_logger
from domain.common.exceptions import BusinessException, InvalidMethodException


logger = get_logger(__name__)


# 业务码 → HTTP 状态码（唯一映射表）
BUSINESS_CODE_TO_HTTP_STATUS = {
    BusinessCode.PARAM_ERROR: http_status.HTTP_400_BAD_REQUEST,
    BusinessCode.PARAM_MISSING: http_status.HTTP_400_BAD_REQUEST,
    BusinessCode.METHOD_NOT_ALLOWED: http_status.HTTP_405_METHOD_NOT_ALLOWED,

    BusinessCode.TRANSFER_ERROR: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
    BusinessCode.REMOTE_FILE_NOT_FOUND: http_status.HTTP_404_NOT_FOUND,
    BusinessCode.REMOTE_UNAUTHORIZED: http_status.HTTP_401_UNAUTHORIZED,

    BusinessCode.SYSTEM_ERROR: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
    BusinessCode.STORAGE_ERROR: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# 允许异常自带状态提示覆盖映射表的业务码
STATUS_HINT_ALLOWED = frozenset({BusinessCode.STORAGE_ERROR})


def business_code_to_http_status(code: int, status_hint: Optional[int] = None) -> int:
    """根据业务码映射HTTP状态码（未知业务码按500处理）。"""
    try:
        bc = BusinessCode(code)
    except ValueError:
        return http_status.HTTP_500_INTERNAL_SERVER_ERROR
    if bc in STATUS_HINT_ALLOWED and status_hint and 400 <= status_hint <= 599:
        return status_hint
    return BUSINESS_CODE_TO_HTTP_STATUS.get(bc, http_status.HTTP_500_INTERNAL_SERVER_ERROR)


def _request_id(request: Request) -> str:
    return getattr(getattr(request, "state", object()), "request_id", None) or str(uuid.uuid4())


def business_exception_response(request: Request, exc: BusinessException) -> JSONResponse:
    """将业务异常渲染为统一错误信封"""
    response = error_response(
        code=exc.code,
        message=exc.message,
        error_type=exc.error_type,
        details=exc.details,
        field=exc.field,
        request_id=_request_id(request),
    )
    status_code = business_code_to_http_status(exc.code, exc.status_hint)
    headers = {"Allow": "POST"} if status_code == http_status.HTTP_405_METHOD_NOT_ALLOWED else None
    return JSONResponse(status_code=status_code, content=response.model_dump(mode='json'), headers=headers)


def register_exception_handlers(app: FastAPI, post_only_paths: Iterable[str] = ()):
    """
    注册全局异常处理器

    Args:
        app: FastAPI应用实例
        post_only_paths: 仅接受 POST 的路径；路由层对其返回的 405 统一渲染为 InvalidMethod
    """
    post_only = frozenset(post_only_paths)

    @app.exception_handler(BusinessException)
    async def business_exception_handler(request: Request, exc: BusinessException):
        """处理业务异常"""
        return business_exception_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """处理参数验证异常"""
        errors = exc.errors()
        first_error = errors[0] if errors else {}
        field = ".".join(str(loc) for loc in first_error.get("loc", [])[1:])

        response = error_response(
            code=BusinessCode.PARAM_ERROR,
            message=f"Validation failed: {first_error.get('msg', 'unknown')}",
            error_type="ValidationError",
            details={"errors": errors},
            field=field,
            request_id=_request_id(request),
        )
        return JSONResponse(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            content=response.model_dump(mode='json')
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """处理HTTP异常"""
        # 路由层拒绝的方法（TRACE、CONNECT 等）与编排器返回同一个 405
        if exc.status_code == http_status.HTTP_405_METHOD_NOT_ALLOWED and request.url.path in post_only:
            return business_exception_response(request, InvalidMethodException(request.method))

        code_mapping = {
            400: BusinessCode.PARAM_ERROR,
            405: BusinessCode.METHOD_NOT_ALLOWED,
        }
        code = code_mapping.get(exc.status_code, BusinessCode.SYSTEM_ERROR)

        response = error_response(
            code=code,
            message=str(exc.detail),
            error_type="HTTPError",
            details={"status_code": exc.status_code},
            request_id=_request_id(request),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=response.model_dump(mode='json'),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """处理所有未捕获的异常"""
        request_id = _request_id(request)

        # 在开发环境可以返回详细错误信息
        details = None
        if app.debug:
            details = {
                "exception": str(exc),
                "traceback": traceback.format_exc()
            }

        response = error_response(
            code=BusinessCode.SYSTEM_ERROR,
            message="Internal server error",
            error_type="SystemError",
            details=details,
            request_id=request_id,
        )

        logger.error(
            "unhandled_exception",
            request_id=request_id,
            error=str(exc),
            exc_info=True,
        )

        return JSONResponse(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response.model_dump(mode='json')
        )

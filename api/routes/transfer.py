"""FTP → 对象存储导入路由。"""
from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_transfer_service
from application.dto import TransferRequestDTO
from application.services.transfer_service import FtpImportService
from core.response import MessageResponse, Response as ApiResponse


router = APIRouter(tags=["FTP 导入"])

IMPORT_PATH = "/import-ftp"

# 常见方法进入编排器，由其返回 405 与固定提示；其余方法在路由层被拒后按同一规则渲染
ACCEPTED_ROUTE_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


async def _read_json_body(request: Request) -> Any:
    """解析 JSON 请求体；空体或非法 JSON 视为缺失"""
    body = await request.body()
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


@router.api_route(
    IMPORT_PATH,
    methods=ACCEPTED_ROUTE_METHODS,
    summary="从 FTP 拉取单个文件并写入存储桶",
    response_model=MessageResponse,
    responses={
        400: {"model": ApiResponse, "description": "缺少必填字段"},
        401: {"model": ApiResponse, "description": "FTP 凭据被拒绝"},
        404: {"model": ApiResponse, "description": "FTP 文件不存在"},
        405: {"model": ApiResponse, "description": "仅接受 POST"},
        500: {"model": ApiResponse, "description": "传输或存储失败"},
    },
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": TransferRequestDTO.model_json_schema(by_alias=True)}},
            "required": True,
        }
    },
)
async def import_ftp(
    request: Request,
    service: FtpImportService = Depends(get_transfer_service),
):
    """
    示例：

        curl -X POST http://localhost:8000/api/v1/import-ftp \\
          -H "Content-Type: application/json" \\
          --data '{"bucketName": "my-bucket", "host": "ftp.example.com", "fileName": "data.csv"}'
    """
    payload = await _read_json_body(request)
    outcome = await service.execute(request.method, payload)
    if not outcome.ok:
        # 交由全局异常处理器按映射表渲染
        raise outcome.error
    return MessageResponse()

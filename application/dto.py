"""
应用层数据传输对象
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TransferRequestDTO(BaseModel):
    """导入请求体（仅用于 OpenAPI 文档；实际校验由领域层按固定顺序完成）"""
    model_config = ConfigDict(populate_by_name=True)

    bucket_name: str = Field(..., alias="bucketName", description="目标存储桶")
    host: str = Field(..., description="FTP 主机名")
    file_name: str = Field(..., alias="fileName", description="要传输的文件名（同时作为对象名）")
    user: Optional[str] = Field(None, description="FTP 用户名，缺省匿名登录")
    password: Optional[str] = Field(None, description="FTP 密码")

"""Storage data transfer objects."""
from typing import Optional
from pydantic import BaseModel


class WriteResult(BaseModel):
    """Streaming write result."""
    bucket: str
    key: str
    size: int
    etag: Optional[str] = None
    content_type: Optional[str] = None

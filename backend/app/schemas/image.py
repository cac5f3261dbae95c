"""이미지 업로드/리사이즈/정리 요청·응답 계약을 위한 Pydantic 스키마입니다."""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UploadedImageOut(CamelModel):
    success: bool = True
    file_id: str
    file_name: str
    original_name: str
    file_type: str
    file_path: Optional[str] = None
    file_data: Optional[str] = None


class ResizeRequest(CamelModel):
    file_name: Optional[str] = None
    resize_type: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    percentage: Optional[int] = None
    file_data: Optional[str] = None


class ResizedImageOut(CamelModel):
    success: bool = True
    resized_file_name: str
    original_name: str
    resized_path: Optional[str] = None
    resized_data: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class CleanupRequest(CamelModel):
    uploaded_file: Optional[str] = None
    resized_file: Optional[str] = None


class CleanupOut(BaseModel):
    success: bool = True
    message: str

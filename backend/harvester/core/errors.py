"""统一错误处理

提供标准化的错误响应结构和自定义异常类。
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorPayload(BaseModel):
    """标准错误响应结构"""

    code: str
    message: str
    data: dict[str, Any] | None = None
    timestamp: str


class AppError(HTTPException):
    """应用自定义异常

    使用示例:
        raise AppError(
            code="scheduler_not_found",
            message="Scheduler 不存在",
            status_code=404,
            data={"id": scheduler_id},
        )
    """

    def __init__(
        self,
        *,
        code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        data: dict[str, Any] | None = None,
    ):
        self.code = code
        self.error_message = message
        self.data = data
        super().__init__(status_code=status_code, detail=message)


class ListingFetchError(Exception):
    """列表页抓取失败

    列表页是一次运行的入口，失败时整次运行中止且不推进游标。
    """

    def __init__(self, page: int, reason: str):
        self.page = page
        self.reason = reason
        super().__init__(f"列表页抓取失败 (page={page}): {reason}")


def create_error_response(
    code: str,
    message: str,
    data: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """创建标准错误响应"""
    return {
        "error": {
            "code": code,
            "message": message,
            "data": data,
            "timestamp": datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z",
        }
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """把 AppError 渲染为标准错误响应"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.code, exc.error_message, exc.data),
    )


# 常用错误快捷函数
def raise_not_found(resource: str, resource_id: str | None = None) -> None:
    """抛出资源不存在错误"""
    raise AppError(
        code=f"{resource}_not_found",
        message=f"{resource.capitalize()} 不存在",
        status_code=status.HTTP_404_NOT_FOUND,
        data={"resource": resource, "id": resource_id} if resource_id else {"resource": resource},
    )


def raise_bad_request(code: str, message: str, data: dict[str, Any] | None = None) -> None:
    """抛出请求参数错误"""
    raise AppError(
        code=code,
        message=message,
        status_code=status.HTTP_400_BAD_REQUEST,
        data=data,
    )

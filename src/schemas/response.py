"""Standard response envelope.

Every success and error body has the shape
``{status_code, status, message, data?}``.
"""

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ApiResponse(BaseModel):
    status_code: int
    status: str
    message: str
    data: Optional[Any] = None


def success_response(message: str, data: Any = None, status_code: int = 200) -> JSONResponse:
    body = ApiResponse(status_code=status_code, status="success", message=message, data=data)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def error_response(status_code: int, message: str) -> JSONResponse:
    body = ApiResponse(status_code=status_code, status="error", message=message)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body, exclude_none=True),
    )

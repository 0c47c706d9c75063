from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel


def _encode(data: Any) -> Any:
    # Wire models are camelCase; dump through their aliases (`_id`, `axeResults`, ...)
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True, mode="json")
    if isinstance(data, (list, tuple)):
        return [_encode(item) for item in data]
    return jsonable_encoder(data)


def api_response(
    *,
    data: Optional[Any] = None,
    message: str = "Operation successful",
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """
    Envelope for every API response: {status_code, status, message, data}.
    `status` is "success" below 400 and "error" otherwise.
    """
    return JSONResponse(
        status_code=status_code,
        content={
            "status_code": status_code,
            "status": "success" if status_code < 400 else "error",
            "message": message,
            "data": _encode(data) if data is not None else {},
        },
    )

import time
import logging
from enum import IntEnum
from typing import Any, Optional
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

class HTTPCode(IntEnum):
    SUCCESS = 200
    CREATED = 201
    BAD_REQUEST = 400
    NOT_FOUND = 404
    CONFLICT = 409
    PAYLOAD_TOO_LARGE = 413
    UNPROCESSABLE_ENTITY = 422
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504

class NetworkResponse:
    """Builds the JSON envelope shared by every endpoint"""

    @staticmethod
    def _elapsed_ms(start_time: Optional[float]) -> Optional[float]:
        if start_time is None:
            return None
        return round((time.time() - start_time) * 1000, 2)

    def success_response(
        self,
        http_code: int,
        message: str,
        data: Any = None,
        resource: str = "",
        start_time: Optional[float] = None
    ) -> JSONResponse:
        """Successful response with payload"""
        body = {
            "success": True,
            "status": int(http_code),
            "message": message,
            "data": jsonable_encoder(data, by_alias=True),
            "resource": resource,
            "duration_ms": self._elapsed_ms(start_time)
        }
        return JSONResponse(status_code=int(http_code), content=body)

    def json_response(
        self,
        http_code: int,
        error_message: str,
        resource: str = "",
        start_time: Optional[float] = None
    ) -> JSONResponse:
        """Error response"""
        logger.debug(f"Error response {int(http_code)} for {resource}: {error_message}")
        body = {
            "success": False,
            "status": int(http_code),
            "error": error_message,
            "data": None,
            "resource": resource,
            "duration_ms": self._elapsed_ms(start_time)
        }
        return JSONResponse(status_code=int(http_code), content=body)

"""
FastAPI middleware for error handling.

Converts domain exceptions into appropriate HTTP responses.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ..utils.exceptions import AuctionError, BidRejectedError, UnknownSessionError
from .schemas import ErrorResponse


async def error_handler_middleware(request: Request, call_next):
    """
    Catch domain exceptions and convert them to HTTP error responses.

    Exception Mapping:
        - UnknownSessionError → 404 Not Found
        - BidRejectedError subclasses → 400 Bad Request
        - Other AuctionError → 500 Internal Server Error
        - Anything else → 500 without internal details
    """
    try:
        response = await call_next(request)
        return response
    except UnknownSessionError as e:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=ErrorResponse(error=e.message, code=e.code).model_dump(),
        )
    except BidRejectedError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error=e.message, code=e.code).model_dump(),
        )
    except AuctionError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=e.message, code=e.code).model_dump(),
        )
    except Exception:
        # Unexpected errors - don't expose internals
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error="An unexpected error occurred",
                code="INTERNAL_SERVER_ERROR",
            ).model_dump(),
        )

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import logging
import traceback
from typing import Callable

from lms.errors import LMSError, UpstreamError

logger = logging.getLogger(__name__)

class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware for the FastAPI application
    """

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            response = await call_next(request)
            return response

        except HTTPException as e:
            # Let FastAPI handle HTTP exceptions normally
            raise e

        except LMSError as e:
            if isinstance(e, UpstreamError):
                logger.error(f"{e.provider} failure on {request.url}: {e.message}")
            else:
                logger.info(f"{e.title} on {request.url}: {e.message}")
            return JSONResponse(
                status_code=e.status_code,
                content={
                    "error": e.title,
                    "message": e.message,
                    "path": str(request.url.path)
                }
            )

        except ValueError as e:
            # Handle validation errors
            logger.warning(f"Validation error on {request.url}: {str(e)}")
            return JSONResponse(
                status_code=400,
                content={
                    "error": "Validation Error",
                    "message": str(e),
                    "path": str(request.url.path)
                }
            )

        except ConnectionError as e:
            # Handle database/Redis connection errors
            logger.error(f"Connection error on {request.url}: {str(e)}")
            return JSONResponse(
                status_code=503,
                content={
                    "error": "Service Unavailable",
                    "message": "Database connection error",
                    "path": str(request.url.path)
                }
            )

        except Exception as e:
            # Handle all other unexpected errors
            logger.error(f"Unexpected error on {request.url}: {str(e)}")
            logger.error(f"Traceback: {traceback.format_exc()}")

            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal Server Error",
                    "message": "An unexpected error occurred",
                    "path": str(request.url.path)
                }
            )

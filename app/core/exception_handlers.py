from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import GlobalException
from app.core.errors import ErrorCode
from app.core.messages import ErrorMessage
from app.core.middlewares import logger
from app.utils.response import error_response, ErrorDetail


def register_exception_handlers(app: FastAPI):
    # ---------- Custom Domain Errors ----------
    @app.exception_handler(GlobalException)
    async def handle_global_exception(
        request: Request, exc: GlobalException
    ):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(
                message=exc.message,
                errors=[
                    ErrorDetail(
                        code=exc.error_code,
                        message=exc.message,
                    )
                ],
                status_code=exc.status_code,
            ).model_dump(),
        )

    # ---------- Request Validation (400) ----------
    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ):
        return JSONResponse(
            status_code=400,
            content=error_response(
                message=ErrorMessage.REQUEST_VALIDATION_FAILED,
                errors=[
                    ErrorDetail(
                        code=ErrorCode.VALIDATION_ERROR,
                        field=".".join(str(part) for part in err.get("loc", ())[1:]) or None,
                        message=err.get("msg", ""),
                    )
                    for err in exc.errors()
                ],
                status_code=400,
            ).model_dump(),
        )

    # ---------- Database Errors ----------
    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(
        request: Request, exc: SQLAlchemyError
    ):
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content=error_response(
                message=ErrorMessage.DATABASE_FAILURE,
                errors=[
                    ErrorDetail(
                        code=ErrorCode.DATABASE_ERROR,
                        message=str(exc),
                    )
                ],
                status_code=500,
            ).model_dump(),
        )

    # ---------- Catch-all (500) ----------
    @app.exception_handler(Exception)
    async def handle_unhandled_exception(
        request: Request, exc: Exception
    ):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=error_response(
                message=ErrorMessage.SERVER_ERROR,
                errors=[
                    ErrorDetail(
                        code=ErrorCode.INTERNAL_SERVER_ERROR,
                        message=str(exc),
                    )
                ],
                status_code=500,
            ).model_dump(),
        )

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.services.errors import Conflict, InvalidArgument, NotFound, ServiceError

ERROR_STATUS: dict[type[ServiceError], int] = {
    InvalidArgument: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    Conflict: status.HTTP_409_CONFLICT,
}


def status_for(exc: ServiceError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=status_for(exc), content={"detail": exc.message})


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)

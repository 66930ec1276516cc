"""Error taxonomy shared by services and routers.

Services raise these; the handlers registered in ``app.main`` turn every
one of them into a ``{"error": kind, "detail": message}`` response.
"""
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class AppError(Exception):
    status_code: int = 400

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.kind, "detail": self.message}
        body.update(self.extra)
        return body


class ValidationError(AppError):
    status_code = 422


class Unauthenticated(AppError):
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class Forbidden(AppError):
    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class EmptyCart(AppError):
    status_code = 400

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class NotFound(AppError):
    status_code = 404


class ItemNotFound(NotFound):
    def __init__(self, family: str, item_id: int):
        super().__init__(f"Item {family}:{item_id} not found", family=family, id=item_id)


class InsufficientStock(AppError):
    status_code = 409

    def __init__(self, family: str, item_id: int, name: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for {name}: requested {requested}, available {available}",
            family=family,
            id=item_id,
            requested=requested,
            available=available,
        )


class InvalidStatus(AppError):
    status_code = 422


class InvalidTransition(AppError):
    status_code = 409


class Conflict(AppError):
    status_code = 409


class PersistenceFailure(AppError):
    status_code = 503

    def __init__(self, message: str = "Storage error, please retry"):
        super().__init__(message)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers: Optional[Dict[str, str]] = None
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"error": ValidationError.__name__, "detail": "Invalid request", "errors": errors},
    )

import logging
import os

import anthropic
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .controllers import accounts, assistant, budget, categories, setup, transactions
from .database import engine, Base
from .errors import BudgetError

logger = logging.getLogger(__name__)

app = FastAPI(title="Zero-Based Budget API")

# Comma-separated; "*" allows any origin (no credentials are used)
origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Create database tables
Base.metadata.create_all(bind=engine)


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = str(first.get("msg", "Invalid value")).removeprefix("Value error, ")
    return f"{location}: {message}" if location else message


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return error_response(400, describe_validation_error(exc))


@app.exception_handler(BudgetError)
async def budget_error_handler(request: Request, exc: BudgetError):
    return error_response(exc.status_code, exc.message)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Store error on {request.method} {request.url.path}")
    return error_response(500, str(exc.__cause__ or exc))


@app.exception_handler(anthropic.APIError)
async def assistant_error_handler(request: Request, exc: anthropic.APIError):
    logger.exception("Assistant backend error")
    return error_response(500, exc.message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(500, str(exc))


# Include routers
app.include_router(setup.router, prefix="/api", tags=["setup"])
app.include_router(accounts.router, prefix="/api", tags=["accounts"])
app.include_router(budget.router, prefix="/api", tags=["budget"])
app.include_router(categories.router, prefix="/api", tags=["categories"])
app.include_router(transactions.router, prefix="/api", tags=["transactions"])
app.include_router(assistant.router, prefix="/api", tags=["assistant"])

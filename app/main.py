from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from app.api.routes import auth, rooms, bookings, payments
from app.core.exceptions import ApiError
from app.core.logging_config import get_logger
from app.utils.api_response import error_response

logger = get_logger()

app = FastAPI(
    title="Room Booking API",
    version="1.0.0",
    description="Rooms, date-ranged reservations and payment reconciliation"
)


# Request Logging Middleware
@app.middleware("http")
async def log_requests(request, call_next):
    logger.info(f"REQUEST: {request.method} {request.url}")

    response = await call_next(request)
    logger.info(f"RESPONSE: {response.status_code} {request.url}")
    return response


# -------- ERROR ENVELOPE: {success: false, message, errors?} --------
@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    logger.info(f"API ERROR: {request.url} -> {exc.status_code} {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_response(exc.message, exc.errors))


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in e["loc"] if p != "body"), "message": e["msg"]}
        for e in exc.errors()
    ]
    return JSONResponse(status_code=400, content=error_response("Validation failed", errors))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"ERROR: {request.url} -> {exc!r}")
    return JSONResponse(status_code=500, content=error_response("Internal server error"))


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -------- ROUTERS --------
app.include_router(auth.router)
app.include_router(rooms.router)
app.include_router(bookings.router)
app.include_router(payments.router)


@app.get("/health", tags=["Root"])
def health():
    return {"success": True, "message": "Server is running", "data": None}

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from pymongo.errors import PyMongoError
from datetime import datetime
from app.logger import logger
from app.config import get_settings
from app.database.database import RecordStore, create_client, get_store
from app.utilities import APIError

### ROUTERS
from app.routers.booking import router as booking_router
from app.routers.category import router as category_router
from app.routers.dashboard import router as dashboard_router
from app.routers.tutor import router as tutor_router
from app.routers.user import router as user_router


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging all HTTP requests and responses.

    Logs request method, URL, response status, and timing information.
    Handles errors by logging exceptions.
    """
    async def dispatch(self, request: Request, call_next):
        # Log request
        start_time = datetime.now()
        logger.info(f"Request: {request.method} {request.url}")

        try:
            response = await call_next(request)
            # Log response
            duration = (datetime.now() - start_time).total_seconds()
            logger.info(f"Response: {response.status_code} - Duration: {duration:.3f}s")
            return response
        except Exception as e:
            # Log error
            logger.error(f"Error processing request: {str(e)}")
            raise

app = FastAPI(
    title=get_settings().app_name,
    version=get_settings().app_version,
    openapi_url="/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add logging middleware
app.add_middleware(LoggingMiddleware)

# Add CORS middleware with environment configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
    max_age=3600
)

# Include routers
app.include_router(category_router, tags=['categories'])
app.include_router(tutor_router, tags=['tutors'])
app.include_router(booking_router, tags=['bookings'])
app.include_router(user_router, tags=['users'])
app.include_router(dashboard_router, tags=['dashboard'])

@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    return JSONResponse(status_code=exc.status_code, content=exc.body())

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed or incomplete request bodies as 400 instead of FastAPI's 422."""
    fields = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "path", "query")]
        name = ".".join(location) or "body"
        if name not in fields:
            fields.append(name)
    logger.info(f"Rejected request to {request.url.path}: invalid {', '.join(fields)}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": f"Missing or invalid fields: {', '.join(fields)}"},
    )

@app.get("/")
def read_root():
    """
    Root endpoint returning API welcome message.

    Returns:
    - dict: Welcome message
    """
    return {"message": "Online Tutor Booking API is running!"}

@app.get("/health")
async def health(store: RecordStore = Depends(get_store)):
    """Ping the document store."""
    try:
        await store.ping()
    except PyMongoError as e:
        logger.error(f"Health check failed: {str(e)}")
        return JSONResponse(status_code=500, content={"ok": False})
    return {"ok": True}

@app.on_event("startup")
async def startup_event():
    """
    Application startup handler.
    Opens the shared store client before any request is served.
    """
    logger.info("Server starting up...")
    settings = get_settings()
    app.state.mongo_client = create_client()
    app.state.store = RecordStore(app.state.mongo_client[settings.db_name])
    await app.state.store.ensure_indexes()
    logger.info(f"Connected to MongoDB database {settings.db_name}")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Server shutting down...")
    client = getattr(app.state, "mongo_client", None)
    if client is not None:
        await client.close()

if __name__ == '__main__':
    import uvicorn
    uvicorn.run(app, host=get_settings().app_host, port=get_settings().app_port)

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import dispose_db, init_db
from api.admin import router as admin_router
from api.applications import router as applications_router
from api.processor import router as processor_router
from services.exceptions import ApplicationValidationError, LoanProcessingError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield
    await dispose_db()


app = FastAPI(
    title=settings.app_name,
    description="Business loan application intake, risk scoring and review API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(processor_router)
app.include_router(applications_router)
app.include_router(admin_router)


@app.exception_handler(LoanProcessingError)
async def loan_processing_error_handler(request: Request, exc: LoanProcessingError):
    content = {"success": False, "message": exc.message}
    if isinstance(exc, ApplicationValidationError):
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


@app.get("/health")
async def health():
    return {"status": "ok"}

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from credably.config import get_settings
from credably.database import init_db
from credably.middleware.correlation import CorrelationMiddleware
from credably.middleware.rate_limit import limiter
from credably.routes import (
    career,
    certifications,
    credibility,
    education,
    learning,
    profile,
    public,
    skills,
    social,
)
from credably.utils import metrics
from credably.utils.errors import (
    APIError,
    RecordValidationError,
    api_error_handler,
    http_exception_handler,
    record_validation_error_handler,
)
from credably.utils.logger import logger

settings = get_settings()

app = FastAPI(title=settings.app_name, version=settings.app_version)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(APIError, api_error_handler)
app.add_exception_handler(RecordValidationError, record_validation_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)

# CORS - explicit origins from config
allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Correlation-ID"],
    expose_headers=["X-Correlation-ID", "Content-Disposition"],
)
app.add_middleware(CorrelationMiddleware)


@app.on_event("startup")
async def startup_event():
    logger.info("Starting Credably backend...")
    await init_db()
    logger.info(f"Backend ready at http://{settings.backend_host}:{settings.backend_port}")


@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.get("/")
async def root():
    return {"status": "ok"}


@app.get("/metrics")
async def metrics_snapshot():
    return metrics.get_snapshot()


app.include_router(credibility.router, prefix="/api/credibility", tags=["Credibility"])
app.include_router(public.router, prefix="/api/public", tags=["Public"])
app.include_router(social.router, prefix="/api/social", tags=["Social"])
app.include_router(education.router, prefix="/api/education", tags=["Education"])
app.include_router(certifications.router, prefix="/api/certifications", tags=["Certifications"])
app.include_router(profile.router, prefix="/api/profile", tags=["Profile"])
app.include_router(skills.router, prefix="/api/skills", tags=["Skills"])
app.include_router(career.router, prefix="/api/career", tags=["Career"])
app.include_router(learning.router, prefix="/api/learning", tags=["Learning"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "credably.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.debug
    )

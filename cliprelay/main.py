from fastapi import FastAPI
from cliprelay.routers import upload, history, configuration
from cliprelay.database import engine, Base
from cliprelay.log_config import configure_logging
from cliprelay.models import kv_entry  # noqa: F401
import structlog

configure_logging()

logger = structlog.get_logger()

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="ClipRelay API",
    description="Upload clipboard content to object storage and browse past uploads",
    version="1.0.0"
)

app.include_router(upload.router)
app.include_router(history.router)
app.include_router(configuration.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "ClipRelay API is running"}


@app.get("/health")
async def health_check():
    """Detailed health check endpoint."""
    return {
        "status": "healthy",
        "service": "cliprelay-api",
        "version": "1.0.0"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)

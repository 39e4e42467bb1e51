from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from savorsync.config import get_settings, configure_logging
from savorsync.api.routes import analytics

settings = get_settings()
configure_logging(settings)

app = FastAPI(
    title=settings.app_name,
    description="Sales, labor and operations metrics for multi-location restaurants",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],  # Dashboard URL
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])


@app.get("/")
async def root():
    return {"message": "SavorSync Analytics API", "version": "1.0.0"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}

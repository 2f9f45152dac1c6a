import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from voyage.config import settings
from voyage.database import Base, engine
from voyage.logging_config import setup_logging
from voyage.auth import router as auth_router
from voyage.agencies import router as agencies_router
from voyage.tours import router as tours_router
from voyage.bookings import router as bookings_router
from voyage.travel_documents import router as travel_documents_router
from voyage.clients import router as clients_router
from voyage.branches import router as branches_router
from voyage.staff import router as staff_router

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)
    Base.metadata.create_all(bind=engine)
    logger.info("%s started", settings.PROJECT_NAME)
    yield

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Travel agency booking and document management API",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(
    auth_router,
    prefix=f"{settings.API_V1_STR}/auth",
    tags=["Authentication"]
)

app.include_router(
    agencies_router,
    prefix=f"{settings.API_V1_STR}/agencies",
    tags=["Agencies"]
)

app.include_router(
    branches_router,
    prefix=f"{settings.API_V1_STR}/branches",
    tags=["Branches"]
)

app.include_router(
    staff_router,
    prefix=f"{settings.API_V1_STR}/staff",
    tags=["Staff"]
)

app.include_router(
    clients_router,
    prefix=f"{settings.API_V1_STR}/clients",
    tags=["Clients"]
)

app.include_router(
    tours_router,
    prefix=f"{settings.API_V1_STR}/tours",
    tags=["Tours"]
)

app.include_router(
    bookings_router,
    prefix=f"{settings.API_V1_STR}/bookings",
    tags=["Bookings"]
)

app.include_router(
    travel_documents_router,
    prefix=settings.API_V1_STR,
    tags=["Travel Documents"]
)

# Permanent uploads; the directory may not exist until the first upload
app.mount(
    f"/{settings.UPLOAD_PUBLIC_PREFIX.strip('/')}",
    StaticFiles(directory=settings.UPLOAD_ROOT, check_dir=False),
    name="uploads"
)

@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": f"{settings.PROJECT_NAME} API",
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

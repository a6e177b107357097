# app/main.py - FastAPI application
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import logging

from app.config import settings
from app.core.exceptions import QuizRoomError
from app.database import engine, Base
from app.api import auth, quiz, rooms, users
from app import models  # noqa: F401  registers tables on Base.metadata

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="QuizRoom API",
    description="Adaptive AI quizzes and live classroom quiz rooms",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.debug
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Create database tables on startup
@app.on_event("startup")
async def startup():
    logger.info("🚀 Starting QuizRoom API...")
    Base.metadata.create_all(bind=engine)
    logger.info("✅ Database tables created/verified")
    settings.is_generation_configured()


@app.get("/")
async def root():
    """API status endpoint"""
    return {
        "message": "🚀 QuizRoom API is running!",
        "version": "1.0.0",
        "docs": "/docs",
        "status": "healthy"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "quizroom-api",
        "version": "1.0.0",
        "poll_interval_seconds": settings.poll_interval_seconds
    }


app.include_router(auth.router, prefix="/auth", tags=["🔐 Authentication"])
app.include_router(users.router, prefix="/users", tags=["👤 Users"])
app.include_router(quiz.router, prefix="/quiz", tags=["🧠 Solo Quiz"])
app.include_router(rooms.router, prefix="/rooms", tags=["🏫 Quiz Rooms"])


@app.exception_handler(QuizRoomError)
async def quiz_room_error_handler(request: Request, exc: QuizRoomError):
    logger.warning(f"⚠️ {type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"❌ Database error on {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=503,
        content={"detail": str(exc) if settings.debug else "Storage unavailable"}
    )

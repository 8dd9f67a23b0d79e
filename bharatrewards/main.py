import logging
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from bharatrewards.routes import admin, auth, quiz, redeem, settings as settings_routes
from bharatrewards.db.base import Base
from bharatrewards.db.sessions import SessionLocal, engine
from bharatrewards.core.config import settings
from bharatrewards.core.exceptions import ConcurrentWriteError
from bharatrewards.services.storage_service import StorageService

# Import all models to ensure they're registered with Base
import bharatrewards.models

logger = logging.getLogger(__name__)

# Create tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    description="Answer questions, earn points, redeem them for rupees"
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(auth.router)
app.include_router(settings_routes.router)
app.include_router(quiz.router)
app.include_router(redeem.router)
app.include_router(admin.router)


@app.exception_handler(ConcurrentWriteError)
async def concurrent_write_handler(request: Request, exc: ConcurrentWriteError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Data changed while saving, please retry"}
    )


@app.on_event("startup")
def startup_event():
    db = SessionLocal()
    try:
        StorageService(db).initialize()
    finally:
        db.close()

    logger.info("%s v%s starting...", settings.APP_NAME, settings.APP_VERSION)
    logger.info("Question generation: %s", "OpenAI" if settings.OPENAI_API_KEY else "fallback sets only")


@app.get("/health")
def health():
    return {"status": "ok"}

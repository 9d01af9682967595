import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from learnhub.core.config import settings
from learnhub.core.security import get_password_hash
from learnhub.db.base import Base
from learnhub.db import session as db_session
from learnhub.api.v1.api import api_router
from learnhub.models.user.user_model import User, UserRole

# --- Logging ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# --- Application ---
app = FastAPI(
    title="LearnHub API",
    openapi_url="/api/v1/openapi.json",
)


def _sanitize_origin(origin: str | None) -> str | None:
    if not origin:
        return None
    value = origin.strip()
    if not value:
        return None
    if not value.startswith("http"):
        value = f"https://{value}"
    return value.rstrip("/")


def _build_cors_origins() -> list[str]:
    origins = {_sanitize_origin(o) for o in settings.BACKEND_CORS_ORIGINS}
    if settings.FRONTEND_BASE_URL is not None:
        origins.add(_sanitize_origin(str(settings.FRONTEND_BASE_URL)))

    allow_origins = sorted({origin for origin in origins if origin})
    logger.info("CORS origins: %s", allow_origins)
    return allow_origins


app.add_middleware(
    CORSMiddleware,
    allow_origins=_build_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type"],
)


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "internal_error"})


app.include_router(api_router, prefix="/api/v1")


def ensure_default_admin() -> None:
    """Create the bootstrap administrator when configured and missing."""
    username = settings.DEFAULT_ADMIN_USERNAME
    password = settings.DEFAULT_ADMIN_PASSWORD
    if not username or not password:
        return

    with db_session.SessionLocal() as session:
        admin_user = session.query(User).filter(User.username == username).first()
        if admin_user is not None:
            logger.info("Default administrator '%s' already present.", username)
            return

        session.add(
            User(
                username=username,
                hashed_password=get_password_hash(password),
                role=UserRole.ADMIN,
                is_active=True,
            )
        )
        session.commit()
        logger.info("Default administrator '%s' created.", username)


# --- Startup ---
@app.on_event("startup")
def startup():
    logger.info("Checking database tables...")
    Base.metadata.create_all(bind=db_session.engine)
    logger.info("Database tables are ready.")
    ensure_default_admin()


@app.get("/")
def read_root():
    return {"message": "Welcome to LearnHub API!"}

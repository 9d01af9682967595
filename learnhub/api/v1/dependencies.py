import logging
import re
from urllib.parse import unquote

from typing import Generator, Optional

from fastapi import Depends, HTTPException, Request, status
from starlette.datastructures import State
from sqlalchemy.orm import Session
from jose import JWTError, ExpiredSignatureError, jwt

from learnhub.db import session as db_session
from learnhub.core import security
from learnhub.models.user.user_model import User

log = logging.getLogger(__name__)


def _get_state_container(request: Request | None) -> Optional[State]:
    """Return the mutable state object associated with the request."""

    if request is None:
        return None

    state = getattr(request, "state", None)
    if state is None:
        state = State()
        setattr(request, "state", state)
    return state


def get_db(request: Request = None) -> Generator[Session, None, None]:  # type: ignore[assignment]
    """Provide one SQLAlchemy session per request.

    ``get_current_user`` and the route handler both depend on ``get_db``. The
    session is cached on ``request.state`` with a reference counter so the
    authenticated ``User`` stays attached until the last dependency exits.
    Without a request (scripts, tests) a standalone session is yielded.
    """

    if request is None:
        db = db_session.SessionLocal()
        try:
            yield db
        finally:
            db.close()
        return

    state = _get_state_container(request)
    db = getattr(state, "_db_session", None)
    if db is None:
        db = db_session.SessionLocal()
        setattr(state, "_db_session", db)
        setattr(state, "_db_refcount", 0)

    refcount = getattr(state, "_db_refcount", 0) + 1
    setattr(state, "_db_refcount", refcount)

    try:
        yield db
    finally:
        refcount = getattr(state, "_db_refcount", 1) - 1
        if refcount <= 0:
            try:
                db.close()
            finally:
                for attr in ("_db_session", "_db_refcount"):
                    if hasattr(state, attr):
                        delattr(state, attr)
        else:
            setattr(state, "_db_refcount", refcount)


def _normalize_token_value(raw_token: str | None) -> str | None:
    """Return a clean JWT string extracted from a cookie or header value.

    Browsers can percent-encode cookie values (``Bearer%20...``) and some
    clients send quoted strings. Case-insensitive ``Bearer`` prefixes are
    stripped.
    """

    if raw_token is None:
        return None

    token = raw_token.strip().strip('"').strip("'")
    if not token:
        return None

    token = unquote(token)

    match = re.match(r"^(bearer|token)[\s,:]+(.+)$", token, flags=re.IGNORECASE)
    if match:
        token = match.group(2)

    token = token.strip()
    return token or None


def _decode_user_from_token(token: str | None, db: Session) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
    )

    token = _normalize_token_value(token)
    if not token:
        log.warning("Authentication failed: no token supplied.")
        raise credentials_exception

    try:
        payload = jwt.decode(token, security.SECRET_KEY, algorithms=[security.ALGORITHM])
        user_id_str: str = payload.get("sub")
        if user_id_str is None:
            log.warning("Authentication failed: token without 'sub'.")
            raise credentials_exception

        user_id = int(user_id_str)
    except ExpiredSignatureError:
        log.warning("Authentication failed: token expired.")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="token_expired")
    except (JWTError, ValueError, TypeError):
        log.warning("Authentication failed: invalid or malformed token.")
        raise credentials_exception

    user = db.get(User, user_id)
    if user is None:
        log.warning("Authentication failed: user %s not found.", user_id)
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="inactive_user")

    return user


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    token_sources = (
        request.cookies.get("access_token"),
        request.headers.get("Authorization"),
    )

    last_unauthorized_error: HTTPException | None = None

    for candidate in token_sources:
        token = _normalize_token_value(candidate)
        if not token:
            continue

        try:
            return _decode_user_from_token(token, db)
        except HTTPException as exc:
            if exc.status_code != status.HTTP_401_UNAUTHORIZED:
                raise
            last_unauthorized_error = exc

    if last_unauthorized_error is not None:
        raise last_unauthorized_error

    return _decode_user_from_token(None, db)


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        log.warning("User %s denied access to an admin route.", current_user.id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return current_user

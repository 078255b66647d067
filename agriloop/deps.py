import time
import threading
from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from . import database, models, security, config, accounts
from .mailer import mailer_from_config
from .errors import AuthError, NotFoundError, RateLimitError


def get_db():
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@lru_cache(maxsize=1)
def get_mailer():
    return mailer_from_config()


# Simple in-memory rate limiter (per-IP) for basic anti-spam protection on signup/login.
# Not suitable for multi-process production; use Redis or a proper rate-limiter there.
RATE_LIMIT_STORE: dict = {}
RATE_LIMIT_LOCK = threading.Lock()


def rate_limiter(request: Request):
    """Basic sliding-window limiter keyed by client IP. Raises RateLimitError (429) when exceeded."""
    client = getattr(request, "client", None)
    client_host = client.host if client else "unknown"

    now = time.time()
    with RATE_LIMIT_LOCK:
        lst = [ts for ts in RATE_LIMIT_STORE.get(client_host, []) if now - ts <= config.RATE_LIMIT_WINDOW]
        if len(lst) >= config.RATE_LIMIT_MAX:
            RATE_LIMIT_STORE[client_host] = lst
            raise RateLimitError(f"Rate limit exceeded: up to {config.RATE_LIMIT_MAX} requests per {config.RATE_LIMIT_WINDOW}s allowed")
        lst.append(now)
        RATE_LIMIT_STORE[client_host] = lst


def bearer_token(request: Request) -> str:
    header = request.headers.get("authorization")
    if not header:
        raise AuthError("Missing token", status_code=401)
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Invalid token", status_code=403)
    return token.strip()


def get_current_user(token: str = Depends(bearer_token), db: Session = Depends(get_db)) -> models.User:
    user = accounts.get_user(db, security.read_access_token(token))
    if user is None:
        raise NotFoundError("User not found")
    return user


def require_role(role: models.RoleEnum):
    def role_checker(user: models.User = Depends(get_current_user)) -> models.User:
        if user.role != role:
            raise AuthError(f"Operation not permitted for role '{user.role.value}'", status_code=403)
        return user
    return role_checker


require_seller = require_role(models.RoleEnum.seller)
require_buyer = require_role(models.RoleEnum.buyer)

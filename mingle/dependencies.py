"""
FastAPI dependencies shared by the routers.

Path-ID dependencies are listed before ``require_identity`` in every
endpoint signature.  FastAPI resolves dependencies in declaration order,
so a malformed ID is reported as a 400 even when the request is also
unauthenticated.
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from mingle.config import Settings
from mingle.database import get_db
from mingle.errors import UnauthorizedError, ValidationError
from mingle.models import MAX_ID
from mingle.security import Identity, PasswordHasher, TokenCodec, bearer_token
from mingle.stores import Store, sql_store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_store(db: AsyncSession = Depends(get_db, scope="function")) -> Store:
    # Function scope closes the session, and so commits, before the response
    # is sent; a failed commit still reaches the error handlers.
    return sql_store(db)


async def require_identity(
    request: Request,
    store: Store = Depends(get_store),
    tokens: TokenCodec = Depends(get_token_codec),
) -> Identity:
    """Resolve the caller from the ``Authorization`` header or fail with 401."""
    user_id = tokens.subject(bearer_token(request.headers.get("Authorization")))
    if not await store.users.exists(user_id):
        raise UnauthorizedError()
    return Identity(user_id=user_id)


# ---------------------------------------------------------------------------
# Path IDs
# ---------------------------------------------------------------------------

def parse_id(raw: str) -> int:
    """Parse a positive integer resource ID taken from the URL path."""
    if not raw.isdecimal():
        raise ValidationError("ID parameter is invalid")
    value = int(raw)
    if not 0 < value <= MAX_ID:
        raise ValidationError("ID parameter is invalid")
    return value


def post_id_param(post_id: str) -> int:
    return parse_id(post_id)


def comment_id_param(comment_id: str) -> int:
    return parse_id(comment_id)


def user_id_param(user_id: str) -> int:
    return parse_id(user_id)

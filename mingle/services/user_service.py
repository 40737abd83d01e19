"""
User service — registration, login and self-profile reads.

Registration keeps the explicit "email already taken" pre-check for a
friendly error message, but the unique constraint on ``users.email`` is
what actually prevents duplicates when two registrations interleave;
the SQL store translates that violation into a ``ValidationError``.
"""
import logging

from starlette.concurrency import run_in_threadpool

from mingle.errors import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from mingle.models import User
from mingle.schemas import LoginRequest, UserCreate
from mingle.security import Identity, PasswordHasher, TokenCodec
from mingle.stores import Store

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _user_to_dict(user: User) -> dict:
    """Serialise a User row; the password hash is never included."""
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "created_at": user.created_at,
    }


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def register(
    store: Store,
    hasher: PasswordHasher,
    tokens: TokenCodec,
    data: UserCreate,
) -> dict:
    """Create a user and return its dict plus a freshly issued token."""
    if await store.users.get_by_email(data.email) is not None:
        raise ValidationError(f"user with email: {data.email} already exists")

    hashed = await run_in_threadpool(hasher.hash, data.password)
    user = await store.users.create(
        email=data.email,
        first_name=data.first_name,
        last_name=data.last_name,
        password=hashed,
    )
    logger.info("Registered user %d", user.id)

    result = _user_to_dict(user)
    result["token"] = tokens.issue(user.id)
    return result


async def login(
    store: Store,
    hasher: PasswordHasher,
    tokens: TokenCodec,
    data: LoginRequest,
) -> str:
    """
    Exchange email and password for a token.

    Unknown email and wrong password are indistinguishable to the caller.
    """
    user = await store.users.get_by_email(data.email)
    if user is None:
        logger.info("Login failed: unknown email")
        raise UnauthorizedError()

    if not await run_in_threadpool(hasher.verify, data.password, user.password):
        logger.info("Login failed: wrong password for user %d", user.id)
        raise UnauthorizedError()

    return tokens.issue(user.id)


async def get_user(store: Store, identity: Identity, user_id: int) -> dict:
    """Return the caller's own profile; other profiles are forbidden."""
    if identity.user_id != user_id:
        logger.info("User %d may not read account %d", identity.user_id, user_id)
        raise ForbiddenError()

    user = await store.users.get(user_id)
    if user is None:
        raise NotFoundError(f"user with ID: {user_id} not found")
    return _user_to_dict(user)

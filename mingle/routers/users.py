from fastapi import APIRouter, Depends, Response

from mingle.config import Settings
from mingle.dependencies import (
    get_password_hasher,
    get_settings,
    get_store,
    get_token_codec,
    require_identity,
    user_id_param,
)
from mingle.schemas import (
    LoginRequest,
    PostResponse,
    RegisteredUserResponse,
    TokenResponse,
    UserCreate,
    UserResponse,
)
from mingle.security import Identity, PasswordHasher, TokenCodec
from mingle.services import post_service, subscription_service, user_service
from mingle.stores import Store

router = APIRouter(prefix="/users", tags=["users"])

AUTH_COOKIE = "Authorization"


def _set_auth_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        AUTH_COOKIE,
        token,
        max_age=settings.TOKEN_TTL_DAYS * 24 * 60 * 60,
        path="/",
        httponly=True,
        samesite="lax",
    )


@router.post("/register", status_code=201, response_model=RegisteredUserResponse)
async def register(
    data: UserCreate,
    response: Response,
    store: Store = Depends(get_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_settings),
):
    user = await user_service.register(store, hasher, tokens, data)
    _set_auth_cookie(response, user["token"], settings)
    return user


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    response: Response,
    store: Store = Depends(get_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_settings),
):
    token = await user_service.login(store, hasher, tokens, data)
    _set_auth_cookie(response, token, settings)
    return {"token": token}


# Registered before "/{user_id}" so "feed" is not taken for an ID.
@router.get("/feed", response_model=list[PostResponse])
async def get_own_feed(
    identity: Identity = Depends(require_identity),
    store: Store = Depends(get_store),
):
    return await subscription_service.get_feed(store, identity.user_id)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int = Depends(user_id_param),
    identity: Identity = Depends(require_identity),
    store: Store = Depends(get_store),
):
    return await user_service.get_user(store, identity, user_id)


@router.get("/{user_id}/posts", response_model=list[PostResponse])
async def list_user_posts(
    user_id: int = Depends(user_id_param),
    store: Store = Depends(get_store),
):
    return await post_service.list_user_posts(store, user_id)


@router.post("/{user_id}/subscriptions", status_code=204)
async def subscribe(
    user_id: int = Depends(user_id_param),
    identity: Identity = Depends(require_identity),
    store: Store = Depends(get_store),
):
    await subscription_service.subscribe(store, identity, user_id)


@router.delete("/{user_id}/subscriptions", status_code=204)
async def unsubscribe(
    user_id: int = Depends(user_id_param),
    identity: Identity = Depends(require_identity),
    store: Store = Depends(get_store),
):
    await subscription_service.unsubscribe(store, identity, user_id)


@router.get("/{user_id}/feed", response_model=list[PostResponse])
async def get_user_feed(
    user_id: int = Depends(user_id_param),
    store: Store = Depends(get_store),
):
    return await subscription_service.get_feed(store, user_id)

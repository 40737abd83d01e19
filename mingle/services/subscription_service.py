"""
Subscription service — the follow graph and the feed built from it.

A feed is every post written by the users someone follows, oldest first,
with like counts attached.
"""
import logging

from mingle.errors import NotFoundError, ValidationError
from mingle.security import Identity
from mingle.services.post_service import posts_with_likes
from mingle.stores import Store

logger = logging.getLogger(__name__)


async def _ensure_user_exists(store: Store, user_id: int) -> None:
    if not await store.users.exists(user_id):
        raise NotFoundError(f"user with ID: {user_id} not found")


async def subscribe(store: Store, identity: Identity, user_id: int) -> None:
    if user_id == identity.user_id:
        raise ValidationError("users can not subscribe to themselves")
    await _ensure_user_exists(store, user_id)
    if not await store.subscriptions.add(identity.user_id, user_id):
        raise ValidationError(f"already subscribed to user with ID: {user_id}")
    logger.info("User %d subscribed to user %d", identity.user_id, user_id)


async def unsubscribe(store: Store, identity: Identity, user_id: int) -> None:
    await _ensure_user_exists(store, user_id)
    if not await store.subscriptions.remove(identity.user_id, user_id):
        raise NotFoundError(
            f"subscription of user {identity.user_id} to user {user_id} was not found"
        )
    logger.info("User %d unsubscribed from user %d", identity.user_id, user_id)


async def get_feed(store: Store, user_id: int) -> list[dict]:
    await _ensure_user_exists(store, user_id)
    followed = await store.subscriptions.list_subscriptions(user_id)
    posts = await store.posts.list_by_authors(followed)
    return await posts_with_likes(store, posts)

"""
Like service — toggling likes on posts and comments.

Policy: a user likes a target at most once; a second like is rejected
with a ``ValidationError`` and leaves the count unchanged.  Only the
liker can remove a like, because the caller's own ``(user, target)``
row is the only one an unlike touches.  Unliking something the caller
never liked is a 404.
"""
import logging

from mingle.errors import NotFoundError, ValidationError
from mingle.security import Identity
from mingle.stores import Store

logger = logging.getLogger(__name__)


async def _ensure_post_exists(store: Store, post_id: int) -> None:
    if await store.posts.get(post_id) is None:
        raise NotFoundError(f"post with ID: {post_id} not found")


async def _ensure_comment_exists(store: Store, comment_id: int) -> None:
    if await store.comments.get(comment_id) is None:
        raise NotFoundError(f"comment with ID: {comment_id} not found")


async def like_post(store: Store, identity: Identity, post_id: int) -> None:
    await _ensure_post_exists(store, post_id)
    if not await store.likes.add_post_like(identity.user_id, post_id):
        raise ValidationError(f"post with ID: {post_id} is already liked")
    logger.info("User %d liked post %d", identity.user_id, post_id)


async def unlike_post(store: Store, identity: Identity, post_id: int) -> None:
    await _ensure_post_exists(store, post_id)
    if not await store.likes.remove_post_like(identity.user_id, post_id):
        raise NotFoundError(
            f"like from user with ID: {identity.user_id} on post with ID: {post_id} is not found"
        )
    logger.info("User %d unliked post %d", identity.user_id, post_id)


async def like_comment(store: Store, identity: Identity, comment_id: int) -> None:
    await _ensure_comment_exists(store, comment_id)
    if not await store.likes.add_comment_like(identity.user_id, comment_id):
        raise ValidationError(f"comment with ID: {comment_id} is already liked")
    logger.info("User %d liked comment %d", identity.user_id, comment_id)


async def unlike_comment(store: Store, identity: Identity, comment_id: int) -> None:
    await _ensure_comment_exists(store, comment_id)
    if not await store.likes.remove_comment_like(identity.user_id, comment_id):
        raise NotFoundError(
            f"like from user with ID: {identity.user_id} on comment with ID: {comment_id} is not found"
        )
    logger.info("User %d unliked comment %d", identity.user_id, comment_id)

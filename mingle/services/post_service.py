"""
Post service — business logic for the Post aggregate.

Design notes
------------
- ``likes`` is never stored on the post row.  Every read counts the
  ``post_likes`` rows at that instant; lists fetch all counts with one
  grouped query instead of one query per post.
- A post that does not exist is a 404 and is checked before ownership,
  so a caller can always tell "missing" (404) from "not yours" (403).
- Deleting a post removes comment likes, comments and post likes before
  the post itself.  All steps run on the request's session, so a
  failure anywhere rolls every step back.
"""
import logging

from mingle.errors import ForbiddenError, NotFoundError
from mingle.models import Post
from mingle.schemas import PostRequest
from mingle.security import Identity
from mingle.stores import Store

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _post_to_dict(post: Post, likes: int) -> dict:
    return {
        "id": post.id,
        "author_id": post.author_id,
        "content": post.content,
        "likes": likes,
        "created_at": post.created_at,
        "updated_at": post.updated_at,
    }


async def posts_with_likes(store: Store, posts: list[Post]) -> list[dict]:
    """Serialise *posts* with their like counts (one count query in total)."""
    counts = await store.likes.count_post_likes(p.id for p in posts)
    return [_post_to_dict(p, counts.get(p.id, 0)) for p in posts]


async def _get_existing_post(store: Store, post_id: int) -> Post:
    post = await store.posts.get(post_id)
    if post is None:
        raise NotFoundError(f"post with ID: {post_id} not found")
    return post


async def _get_owned_post(store: Store, identity: Identity, post_id: int) -> Post:
    post = await _get_existing_post(store, post_id)
    if post.author_id != identity.user_id:
        logger.info(
            "User %d can not modify post %d of author %d",
            identity.user_id, post_id, post.author_id,
        )
        raise ForbiddenError()
    return post


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def create_post(store: Store, identity: Identity, data: PostRequest) -> dict:
    post = await store.posts.create(author_id=identity.user_id, content=data.content)
    logger.info("User %d created post %d", identity.user_id, post.id)
    return _post_to_dict(post, 0)


async def get_post(store: Store, post_id: int) -> dict:
    post = await _get_existing_post(store, post_id)
    counts = await store.likes.count_post_likes([post.id])
    return _post_to_dict(post, counts.get(post.id, 0))


async def list_user_posts(store: Store, user_id: int) -> list[dict]:
    if not await store.users.exists(user_id):
        raise NotFoundError(f"user with ID: {user_id} not found")
    posts = await store.posts.list_by_authors([user_id])
    return await posts_with_likes(store, posts)


async def update_post(store: Store, identity: Identity, post_id: int, data: PostRequest) -> dict:
    post = await _get_owned_post(store, identity, post_id)
    post = await store.posts.update(post, data.content)
    counts = await store.likes.count_post_likes([post.id])
    return _post_to_dict(post, counts.get(post.id, 0))


async def delete_post(store: Store, identity: Identity, post_id: int) -> None:
    """Delete an owned post together with its comments and all their likes."""
    await _get_owned_post(store, identity, post_id)

    comment_ids = await store.comments.ids_by_post(post_id)
    await store.likes.delete_comment_likes(comment_ids)
    await store.comments.delete_by_post(post_id)
    await store.likes.delete_post_likes(post_id)

    if not await store.posts.delete(post_id):
        # A concurrent delete got there first.
        raise NotFoundError(f"post with ID: {post_id} not found")

    logger.info(
        "User %d deleted post %d with %d comments",
        identity.user_id, post_id, len(comment_ids),
    )

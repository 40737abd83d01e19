"""
Comment service — comments on posts.

Comments follow the same ownership rules as posts: anyone may read,
only the author may edit or delete.  Deleting a comment removes its
likes in the same transaction.
"""
import logging

from mingle.errors import ForbiddenError, NotFoundError
from mingle.models import Comment
from mingle.schemas import CommentRequest
from mingle.security import Identity
from mingle.stores import Store

logger = logging.getLogger(__name__)


def _comment_to_dict(comment: Comment, likes: int) -> dict:
    return {
        "id": comment.id,
        "author_id": comment.author_id,
        "post_id": comment.post_id,
        "content": comment.content,
        "likes": likes,
        "created_at": comment.created_at,
        "updated_at": comment.updated_at,
    }


async def _ensure_post_exists(store: Store, post_id: int) -> None:
    if await store.posts.get(post_id) is None:
        raise NotFoundError(f"post with ID: {post_id} not found")


async def _get_existing_comment(store: Store, comment_id: int) -> Comment:
    comment = await store.comments.get(comment_id)
    if comment is None:
        raise NotFoundError(f"comment with ID: {comment_id} not found")
    return comment


async def _get_owned_comment(store: Store, identity: Identity, comment_id: int) -> Comment:
    comment = await _get_existing_comment(store, comment_id)
    if comment.author_id != identity.user_id:
        logger.info(
            "User %d can not modify comment %d of author %d",
            identity.user_id, comment_id, comment.author_id,
        )
        raise ForbiddenError()
    return comment


async def _with_likes(store: Store, comment: Comment) -> dict:
    counts = await store.likes.count_comment_likes([comment.id])
    return _comment_to_dict(comment, counts.get(comment.id, 0))


async def create_comment(
    store: Store, identity: Identity, post_id: int, data: CommentRequest
) -> dict:
    await _ensure_post_exists(store, post_id)
    comment = await store.comments.create(
        post_id=post_id, author_id=identity.user_id, content=data.content
    )
    logger.info("User %d commented on post %d", identity.user_id, post_id)
    return _comment_to_dict(comment, 0)


async def list_post_comments(store: Store, post_id: int) -> list[dict]:
    await _ensure_post_exists(store, post_id)
    comments = await store.comments.list_by_post(post_id)
    counts = await store.likes.count_comment_likes(c.id for c in comments)
    return [_comment_to_dict(c, counts.get(c.id, 0)) for c in comments]


async def get_comment(store: Store, comment_id: int) -> dict:
    comment = await _get_existing_comment(store, comment_id)
    return await _with_likes(store, comment)


async def update_comment(
    store: Store, identity: Identity, comment_id: int, data: CommentRequest
) -> dict:
    comment = await _get_owned_comment(store, identity, comment_id)
    comment = await store.comments.update(comment, data.content)
    return await _with_likes(store, comment)


async def delete_comment(store: Store, identity: Identity, comment_id: int) -> None:
    await _get_owned_comment(store, identity, comment_id)
    await store.likes.delete_comment_likes([comment_id])
    if not await store.comments.delete(comment_id):
        raise NotFoundError(f"comment with ID: {comment_id} not found")
    logger.info("User %d deleted comment %d", identity.user_id, comment_id)

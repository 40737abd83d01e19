"""
SQLAlchemy implementation of the storage capabilities.

Every store works on the one ``AsyncSession`` it was built with, so all
steps of a service operation share the request's transaction.  Stores
flush but never commit; ``get_db`` owns the transaction boundary.
"""
import logging
from typing import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mingle.errors import ValidationError
from mingle.models import Comment, CommentLike, Post, PostLike, Subscription, User, utcnow
from mingle.stores.base import Store

logger = logging.getLogger(__name__)


class SqlUserStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, email: str, first_name: str, last_name: str, password: str) -> User:
        user = User(email=email, first_name=first_name, last_name=last_name, password=password)
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError:
            # A concurrent registration won the race past the pre-check.
            logger.warning("Unique constraint rejected user email %s", email)
            raise ValidationError(f"user with email: {email} already exists") from None
        return user

    async def get(self, user_id: int) -> User | None:
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def exists(self, user_id: int) -> bool:
        result = await self.session.execute(select(User.id).where(User.id == user_id))
        return result.scalar_one_or_none() is not None


class SqlPostStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, author_id: int, content: str) -> Post:
        post = Post(author_id=author_id, content=content)
        self.session.add(post)
        await self.session.flush()
        return post

    async def get(self, post_id: int) -> Post | None:
        return await self.session.get(Post, post_id)

    async def list_by_authors(self, author_ids: Iterable[int]) -> list[Post]:
        author_ids = list(author_ids)
        if not author_ids:
            return []
        q = (
            select(Post)
            .where(Post.author_id.in_(author_ids))
            .order_by(Post.created_at.asc(), Post.id.asc())
        )
        result = await self.session.execute(q)
        return list(result.scalars().all())

    async def update(self, post: Post, content: str) -> Post:
        post.content = content
        post.updated_at = utcnow()
        await self.session.flush()
        return post

    async def delete(self, post_id: int) -> bool:
        result = await self.session.execute(delete(Post).where(Post.id == post_id))
        return result.rowcount > 0


class SqlCommentStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, post_id: int, author_id: int, content: str) -> Comment:
        comment = Comment(post_id=post_id, author_id=author_id, content=content)
        self.session.add(comment)
        await self.session.flush()
        return comment

    async def get(self, comment_id: int) -> Comment | None:
        return await self.session.get(Comment, comment_id)

    async def list_by_post(self, post_id: int) -> list[Comment]:
        q = (
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        result = await self.session.execute(q)
        return list(result.scalars().all())

    async def ids_by_post(self, post_id: int) -> list[int]:
        result = await self.session.execute(select(Comment.id).where(Comment.post_id == post_id))
        return list(result.scalars().all())

    async def update(self, comment: Comment, content: str) -> Comment:
        comment.content = content
        comment.updated_at = utcnow()
        await self.session.flush()
        return comment

    async def delete(self, comment_id: int) -> bool:
        result = await self.session.execute(delete(Comment).where(Comment.id == comment_id))
        return result.rowcount > 0

    async def delete_by_post(self, post_id: int) -> int:
        result = await self.session.execute(delete(Comment).where(Comment.post_id == post_id))
        return result.rowcount


class SqlLikeStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _add(self, like) -> bool:
        self.session.add(like)
        try:
            await self.session.flush()
        except IntegrityError:
            raise ValidationError("like already exists") from None
        return True

    # --- posts ---

    async def add_post_like(self, user_id: int, post_id: int) -> bool:
        if await self.session.get(PostLike, (user_id, post_id)) is not None:
            return False
        return await self._add(PostLike(user_id=user_id, post_id=post_id))

    async def remove_post_like(self, user_id: int, post_id: int) -> bool:
        result = await self.session.execute(
            delete(PostLike).where(PostLike.user_id == user_id, PostLike.post_id == post_id)
        )
        return result.rowcount > 0

    async def count_post_likes(self, post_ids: Iterable[int]) -> dict[int, int]:
        post_ids = list(post_ids)
        if not post_ids:
            return {}
        q = (
            select(PostLike.post_id, func.count())
            .where(PostLike.post_id.in_(post_ids))
            .group_by(PostLike.post_id)
        )
        result = await self.session.execute(q)
        return {post_id: count for post_id, count in result.all()}

    async def delete_post_likes(self, post_id: int) -> int:
        result = await self.session.execute(delete(PostLike).where(PostLike.post_id == post_id))
        return result.rowcount

    # --- comments ---

    async def add_comment_like(self, user_id: int, comment_id: int) -> bool:
        if await self.session.get(CommentLike, (user_id, comment_id)) is not None:
            return False
        return await self._add(CommentLike(user_id=user_id, comment_id=comment_id))

    async def remove_comment_like(self, user_id: int, comment_id: int) -> bool:
        result = await self.session.execute(
            delete(CommentLike).where(
                CommentLike.user_id == user_id, CommentLike.comment_id == comment_id
            )
        )
        return result.rowcount > 0

    async def count_comment_likes(self, comment_ids: Iterable[int]) -> dict[int, int]:
        comment_ids = list(comment_ids)
        if not comment_ids:
            return {}
        q = (
            select(CommentLike.comment_id, func.count())
            .where(CommentLike.comment_id.in_(comment_ids))
            .group_by(CommentLike.comment_id)
        )
        result = await self.session.execute(q)
        return {comment_id: count for comment_id, count in result.all()}

    async def delete_comment_likes(self, comment_ids: Iterable[int]) -> int:
        comment_ids = list(comment_ids)
        if not comment_ids:
            return 0
        result = await self.session.execute(
            delete(CommentLike).where(CommentLike.comment_id.in_(comment_ids))
        )
        return result.rowcount


class SqlSubscriptionStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, user_id: int, subscription_id: int) -> bool:
        if await self.session.get(Subscription, (user_id, subscription_id)) is not None:
            return False
        self.session.add(Subscription(user_id=user_id, subscription_id=subscription_id))
        try:
            await self.session.flush()
        except IntegrityError:
            raise ValidationError("subscription already exists") from None
        return True

    async def remove(self, user_id: int, subscription_id: int) -> bool:
        result = await self.session.execute(
            delete(Subscription).where(
                Subscription.user_id == user_id,
                Subscription.subscription_id == subscription_id,
            )
        )
        return result.rowcount > 0

    async def list_subscriptions(self, user_id: int) -> list[int]:
        result = await self.session.execute(
            select(Subscription.subscription_id).where(Subscription.user_id == user_id)
        )
        return list(result.scalars().all())


def sql_store(session: AsyncSession) -> Store:
    """Bind every storage capability to *session*."""
    return Store(
        users=SqlUserStore(session),
        posts=SqlPostStore(session),
        comments=SqlCommentStore(session),
        likes=SqlLikeStore(session),
        subscriptions=SqlSubscriptionStore(session),
    )

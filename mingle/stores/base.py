"""
Storage capabilities the service layer depends on.

Services only ever talk to these protocols.  ``mingle.stores.sql`` is the
production implementation; the test suite ships an in-memory double that
satisfies the same protocols.
"""
from dataclasses import dataclass
from typing import Iterable, Protocol

from mingle.models import Comment, Post, User


class UserStore(Protocol):
    async def create(self, email: str, first_name: str, last_name: str, password: str) -> User: ...

    async def get(self, user_id: int) -> User | None: ...

    async def get_by_email(self, email: str) -> User | None: ...

    async def exists(self, user_id: int) -> bool: ...


class PostStore(Protocol):
    async def create(self, author_id: int, content: str) -> Post: ...

    async def get(self, post_id: int) -> Post | None: ...

    async def list_by_authors(self, author_ids: Iterable[int]) -> list[Post]: ...

    async def update(self, post: Post, content: str) -> Post: ...

    async def delete(self, post_id: int) -> bool: ...


class CommentStore(Protocol):
    async def create(self, post_id: int, author_id: int, content: str) -> Comment: ...

    async def get(self, comment_id: int) -> Comment | None: ...

    async def list_by_post(self, post_id: int) -> list[Comment]: ...

    async def ids_by_post(self, post_id: int) -> list[int]: ...

    async def update(self, comment: Comment, content: str) -> Comment: ...

    async def delete(self, comment_id: int) -> bool: ...

    async def delete_by_post(self, post_id: int) -> int: ...


class LikeStore(Protocol):
    async def add_post_like(self, user_id: int, post_id: int) -> bool: ...

    async def remove_post_like(self, user_id: int, post_id: int) -> bool: ...

    async def count_post_likes(self, post_ids: Iterable[int]) -> dict[int, int]: ...

    async def delete_post_likes(self, post_id: int) -> int: ...

    async def add_comment_like(self, user_id: int, comment_id: int) -> bool: ...

    async def remove_comment_like(self, user_id: int, comment_id: int) -> bool: ...

    async def count_comment_likes(self, comment_ids: Iterable[int]) -> dict[int, int]: ...

    async def delete_comment_likes(self, comment_ids: Iterable[int]) -> int: ...


class SubscriptionStore(Protocol):
    async def add(self, user_id: int, subscription_id: int) -> bool: ...

    async def remove(self, user_id: int, subscription_id: int) -> bool: ...

    async def list_subscriptions(self, user_id: int) -> list[int]: ...


@dataclass
class Store:
    """All storage capabilities bound to one unit of work."""

    users: UserStore
    posts: PostStore
    comments: CommentStore
    likes: LikeStore
    subscriptions: SubscriptionStore

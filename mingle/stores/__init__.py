from mingle.stores.base import CommentStore, LikeStore, PostStore, Store, SubscriptionStore, UserStore
from mingle.stores.sql import sql_store

__all__ = [
    "CommentStore",
    "LikeStore",
    "PostStore",
    "Store",
    "SubscriptionStore",
    "UserStore",
    "sql_store",
]

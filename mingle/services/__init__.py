# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic for a single domain aggregate:
#
#   user_service          — registration, login, self profile
#   post_service          — CRUD for Post, cascade delete, like counts
#   comment_service       — CRUD for Comment on a Post
#   like_service          — like / unlike posts and comments
#   subscription_service  — follow graph and feeds
#
# All service functions accept a ``Store`` as their first argument and,
# where the caller matters, an explicit ``Identity``.  The router layer
# owns the transaction boundary through the ``get_db`` dependency.

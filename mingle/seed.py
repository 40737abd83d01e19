"""Development database seeder.

Goes through the service layer, so seeded data obeys the same rules as
data created over HTTP (hashed passwords, one like per user and target).
"""
import argparse
import asyncio
import random
import time

from sqlalchemy.ext.asyncio import AsyncSession

from mingle.config import get_settings
from mingle.database import Base, build_engine, build_session_factory
from mingle.logging_config import configure_logging
from mingle.schemas import CommentRequest, PostRequest, UserCreate
from mingle.security import Identity, PasswordHasher, TokenCodec
from mingle.services import comment_service, like_service, post_service, subscription_service, user_service
from mingle.stores import sql_store

TOPICS = ["python", "fastapi", "postgresql", "docker", "testing", "security", "cats", "coffee"]

DEFAULT_PASSWORD = "mingle-password"


async def seed_database(
    session: AsyncSession,
    hasher: PasswordHasher,
    tokens: TokenCodec,
    num_users: int = 5,
    posts_per_user: int = 3,
    comments_per_post: int = 2,
    rng: random.Random | None = None,
) -> dict[str, int]:
    """Populate *session* with a small social graph and return row counts."""
    rng = rng or random.Random(0)
    store = sql_store(session)
    totals = {"users": 0, "posts": 0, "comments": 0, "likes": 0, "subscriptions": 0}

    identities: list[Identity] = []
    for i in range(num_users):
        user = await user_service.register(store, hasher, tokens, UserCreate(
            email=f"user_{i:04d}@mingle.io",
            first_name=f"User{i}",
            last_name="Seed",
            password=DEFAULT_PASSWORD,
        ))
        identities.append(Identity(user_id=user["id"]))
    totals["users"] = len(identities)

    for identity in identities:
        others = [other for other in identities if other != identity]
        for target in rng.sample(others, k=min(2, len(others))):
            await subscription_service.subscribe(store, identity, target.user_id)
            totals["subscriptions"] += 1

    for identity in identities:
        for _ in range(posts_per_user):
            post = await post_service.create_post(store, identity, PostRequest(
                content=f"Thoughts on {rng.choice(TOPICS)} from user {identity.user_id}",
            ))
            totals["posts"] += 1

            for commenter in rng.sample(identities, k=min(comments_per_post, len(identities))):
                comment = await comment_service.create_comment(
                    store, commenter, post["id"], CommentRequest(content="Nice one!")
                )
                totals["comments"] += 1
                if rng.random() > 0.5:
                    await like_service.like_comment(store, identity, comment["id"])
                    totals["likes"] += 1

            for liker in rng.sample(identities, k=rng.randint(0, len(identities))):
                await like_service.like_post(store, liker, post["id"])
                totals["likes"] += 1

    return totals


async def seed(reset: bool = False, small: bool = False) -> None:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    engine = build_engine(settings)
    session_factory = build_session_factory(engine)

    start = time.perf_counter()
    async with engine.begin() as conn:
        if reset:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with session_factory() as session:
        totals = await seed_database(
            session,
            PasswordHasher(settings.BCRYPT_ROUNDS),
            TokenCodec.from_settings(settings),
            num_users=5 if small else 50,
            posts_per_user=2 if small else 20,
        )
        await session.commit()
    await engine.dispose()

    elapsed = time.perf_counter() - start
    print(f"Seeding complete in {elapsed:.1f}s")
    for name, count in totals.items():
        print(f"  {name}: {count}")
    print(f"  password for every user: {DEFAULT_PASSWORD}")


def main():
    parser = argparse.ArgumentParser(description="Seed the mingle database")
    parser.add_argument("--small", action="store_true", help="Use a small dataset")
    parser.add_argument("--reset", action="store_true", help="Drop all tables first")
    args = parser.parse_args()
    asyncio.run(seed(reset=args.reset, small=args.small))


if __name__ == "__main__":
    main()

"""
Comment endpoint tests — commenting on posts, reading comments back and
author-only edits and deletes.
"""
import pytest
from httpx import AsyncClient


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _post_with_comment(client: AsyncClient, post_author: dict, commenter: dict) -> tuple[int, dict]:
    """Create a post and one comment on it, returning (post_id, comment)."""
    post = await client.post("/posts", json={"content": "a post"}, headers=post_author)
    assert post.status_code == 201
    post_id = post.json()["id"]

    comment = await client.post(
        f"/posts/{post_id}/comments", json={"content": "a comment"}, headers=commenter
    )
    assert comment.status_code == 201
    return post_id, comment.json()


# ---------------------------------------------------------------------------
# Create / read
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_add_comment(async_client: AsyncClient, register_user):
    _, author = await register_user("author")
    commenter_id, commenter = await register_user("commenter")

    post_id, comment = await _post_with_comment(async_client, author, commenter)
    assert comment["postId"] == post_id
    assert comment["authorId"] == commenter_id
    assert comment["content"] == "a comment"
    assert comment["likes"] == 0
    assert "id" in comment


@pytest.mark.asyncio
async def test_add_comment_to_missing_post(async_client: AsyncClient, register_user):
    _, headers = await register_user()

    resp = await async_client.post("/posts/555/comments", json={"content": "?"}, headers=headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_add_comment_requires_auth(async_client: AsyncClient, register_user):
    _, headers = await register_user()
    post = await async_client.post("/posts", json={"content": "p"}, headers=headers)

    resp = await async_client.post(f"/posts/{post.json()['id']}/comments", json={"content": "anon"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_add_empty_comment_rejected(async_client: AsyncClient, register_user):
    _, headers = await register_user()
    post = await async_client.post("/posts", json={"content": "p"}, headers=headers)

    resp = await async_client.post(
        f"/posts/{post.json()['id']}/comments", json={"content": ""}, headers=headers
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_list_post_comments_in_creation_order(async_client: AsyncClient, register_user):
    _, headers = await register_user()
    post = await async_client.post("/posts", json={"content": "p"}, headers=headers)
    post_id = post.json()["id"]

    ids = []
    for text in ("first", "second", "third"):
        resp = await async_client.post(
            f"/posts/{post_id}/comments", json={"content": text}, headers=headers
        )
        ids.append(resp.json()["id"])

    resp = await async_client.get(f"/posts/{post_id}/comments")
    assert resp.status_code == 200
    comments = resp.json()
    assert [c["id"] for c in comments] == ids
    assert [c["content"] for c in comments] == ["first", "second", "third"]


@pytest.mark.asyncio
async def test_list_comments_of_post_without_comments(async_client: AsyncClient, register_user):
    _, headers = await register_user()
    post = await async_client.post("/posts", json={"content": "quiet"}, headers=headers)

    resp = await async_client.get(f"/posts/{post.json()['id']}/comments")
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.asyncio
async def test_get_comment(async_client: AsyncClient, register_user):
    _, headers = await register_user()
    _, comment = await _post_with_comment(async_client, headers, headers)

    resp = await async_client.get(f"/comments/{comment['id']}")
    assert resp.status_code == 200
    assert resp.json()["content"] == "a comment"


@pytest.mark.asyncio
async def test_get_missing_comment(async_client: AsyncClient):
    resp = await async_client.get("/comments/31337")
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_update_own_comment(async_client: AsyncClient, register_user):
    _, author = await register_user("author")
    _, commenter = await register_user("commenter")
    _, comment = await _post_with_comment(async_client, author, commenter)

    resp = await async_client.put(
        f"/comments/{comment['id']}", json={"content": "edited"}, headers=commenter
    )
    assert resp.status_code == 200
    assert resp.json()["content"] == "edited"


@pytest.mark.asyncio
async def test_post_author_can_not_edit_foreign_comment(async_client: AsyncClient, register_user):
    """Owning the post grants nothing over other people's comments."""
    _, author = await register_user("author")
    _, commenter = await register_user("commenter")
    _, comment = await _post_with_comment(async_client, author, commenter)

    resp = await async_client.put(
        f"/comments/{comment['id']}", json={"content": "hijack"}, headers=author
    )
    assert resp.status_code == 403

    resp = await async_client.delete(f"/comments/{comment['id']}", headers=author)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_delete_own_comment(async_client: AsyncClient, register_user):
    _, author = await register_user("author")
    _, commenter = await register_user("commenter")
    post_id, comment = await _post_with_comment(async_client, author, commenter)
    await async_client.post(f"/comments/{comment['id']}/likes", headers=author)

    resp = await async_client.delete(f"/comments/{comment['id']}", headers=commenter)
    assert resp.status_code == 204

    assert (await async_client.get(f"/comments/{comment['id']}")).status_code == 404
    listing = await async_client.get(f"/posts/{post_id}/comments")
    assert listing.json() == []
    # The post itself is untouched.
    assert (await async_client.get(f"/posts/{post_id}")).status_code == 200


@pytest.mark.asyncio
async def test_delete_missing_comment(async_client: AsyncClient, register_user):
    _, headers = await register_user()

    resp = await async_client.delete("/comments/404", headers=headers)
    assert resp.status_code == 404

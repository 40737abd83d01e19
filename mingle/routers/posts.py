from fastapi import APIRouter, Depends

from mingle.dependencies import get_store, post_id_param, require_identity
from mingle.schemas import CommentRequest, CommentResponse, PostRequest, PostResponse
from mingle.security import Identity
from mingle.services import comment_service, like_service, post_service
from mingle.stores import Store

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("", status_code=201, response_model=PostResponse)
async def create_post(
    data: PostRequest,
    identity: Identity = Depends(require_identity),
    store: Store = Depends(get_store),
):
    return await post_service.create_post(store, identity, data)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int = Depends(post_id_param),
    store: Store = Depends(get_store),
):
    return await post_service.get_post(store, post_id)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    data: PostRequest,
    post_id: int = Depends(post_id_param),
    identity: Identity = Depends(require_identity),
    store: Store = Depends(get_store),
):
    return await post_service.update_post(store, identity, post_id, data)


@router.delete("/{post_id}", status_code=204)
async def delete_post(
    post_id: int = Depends(post_id_param),
    identity: Identity = Depends(require_identity),
    store: Store = Depends(get_store),
):
    await post_service.delete_post(store, identity, post_id)


@router.post("/{post_id}/comments", status_code=201, response_model=CommentResponse)
async def create_comment(
    data: CommentRequest,
    post_id: int = Depends(post_id_param),
    identity: Identity = Depends(require_identity),
    store: Store = Depends(get_store),
):
    return await comment_service.create_comment(store, identity, post_id, data)


@router.get("/{post_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    post_id: int = Depends(post_id_param),
    store: Store = Depends(get_store),
):
    return await comment_service.list_post_comments(store, post_id)


@router.post("/{post_id}/likes", status_code=204)
async def like_post(
    post_id: int = Depends(post_id_param),
    identity: Identity = Depends(require_identity),
    store: Store = Depends(get_store),
):
    await like_service.like_post(store, identity, post_id)


@router.delete("/{post_id}/likes", status_code=204)
async def unlike_post(
    post_id: int = Depends(post_id_param),
    identity: Identity = Depends(require_identity),
    store: Store = Depends(get_store),
):
    await like_service.unlike_post(store, identity, post_id)

from fastapi import APIRouter, Depends

from mingle.dependencies import comment_id_param, get_store, require_identity
from mingle.schemas import CommentRequest, CommentResponse
from mingle.security import Identity
from mingle.services import comment_service, like_service
from mingle.stores import Store

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/{comment_id}", response_model=CommentResponse)
async def get_comment(
    comment_id: int = Depends(comment_id_param),
    store: Store = Depends(get_store),
):
    return await comment_service.get_comment(store, comment_id)


@router.put("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    data: CommentRequest,
    comment_id: int = Depends(comment_id_param),
    identity: Identity = Depends(require_identity),
    store: Store = Depends(get_store),
):
    return await comment_service.update_comment(store, identity, comment_id, data)


@router.delete("/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: int = Depends(comment_id_param),
    identity: Identity = Depends(require_identity),
    store: Store = Depends(get_store),
):
    await comment_service.delete_comment(store, identity, comment_id)


@router.post("/{comment_id}/likes", status_code=204)
async def like_comment(
    comment_id: int = Depends(comment_id_param),
    identity: Identity = Depends(require_identity),
    store: Store = Depends(get_store),
):
    await like_service.like_comment(store, identity, comment_id)


@router.delete("/{comment_id}/likes", status_code=204)
async def unlike_comment(
    comment_id: int = Depends(comment_id_param),
    identity: Identity = Depends(require_identity),
    store: Store = Depends(get_store),
):
    await like_service.unlike_comment(store, identity, comment_id)

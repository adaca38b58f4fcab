from fastapi import APIRouter, Depends, Query
from fastapi.responses import ORJSONResponse

from speech_api.dependencies import get_history_store
from speech_api.errors import PersistenceError
from speech_api.schemas.history import HistoryListResponse
from speech_api.services.history_store import MAX_LIST_LIMIT, HistoryStore

router = APIRouter(prefix="/api/v1", tags=["history"])


@router.get("/history", response_model=HistoryListResponse)
async def list_history(
    user_id: str | None = Query(default=None, alias="userId"),
    limit: int = Query(default=50, ge=1, le=MAX_LIST_LIMIT),
    store: HistoryStore = Depends(get_history_store),
):
    try:
        records = await store.list(caller_id=user_id, limit=limit)
    except PersistenceError as exc:
        return ORJSONResponse({"message": exc.message, "error": exc.detail}, status_code=500)
    items = [record.to_payload() for record in records]
    return HistoryListResponse(items=items, count=len(items))

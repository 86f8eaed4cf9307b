from fastapi import APIRouter, Depends, Header, Query, Response, status

from ..clock import Clock, make_clock
from ..config import settings
from ..errors import InvalidArgumentError
from ..models.api import (
    DueScope,
    ListSort,
    ReviewRequest,
    ReviewResponse,
    VocabItemView,
    VocabListResponse,
    WordCreateRequest,
    WordUpdateRequest,
)
from ..models.vocab import VocabItem, VocabStats
from ..scheduler import classify_mastery, interval_text, map_button_to_quality
from ..session import VocabularySession, user_lock
from ..store import VocabStore, get_store

router = APIRouter(tags=["vocab"])


def get_clock() -> Clock:
    """現在時刻の取得元。テストでは dependency_overrides で固定時刻に差し替える。"""
    return make_clock(settings.timezone)


def get_user_id(x_user_id: str | None = Header(default=None)) -> str:
    user_id = (x_user_id or "").strip()
    return user_id or settings.default_user_id


def _view(item: VocabItem) -> VocabItemView:
    return VocabItemView(
        item=item,
        mastery=classify_mastery(item),
        interval_text=interval_text(item.interval),
    )


def _list(items: list[VocabItem]) -> VocabListResponse:
    return VocabListResponse(items=[_view(item) for item in items], total=len(items))


@router.get("/", response_model=VocabListResponse, summary="単語一覧")
def list_words(
    sort: ListSort = Query(default=ListSort.created),
    store: VocabStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_user_id),
) -> VocabListResponse:
    """List the user's items in insertion order, or by mastery with `sort=mastery`."""
    session = VocabularySession.open(store, user_id, clock)
    items = session.sorted_by_mastery() if sort is ListSort.mastery else session.items
    return _list(items)


@router.post(
    "/",
    response_model=VocabItemView,
    status_code=status.HTTP_201_CREATED,
    summary="単語を追加（同じ綴りなら表示テキストを更新）",
)
def add_word(
    req: WordCreateRequest,
    store: VocabStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_user_id),
) -> VocabItemView:
    with user_lock(user_id):
        session = VocabularySession.open(store, user_id, clock)
        item = session.add_word(req.word, req.translation, req.example, req.phonetic)
        session.save()
    return _view(item)


@router.get("/due", response_model=VocabListResponse, summary="復習対象の単語")
def due_words(
    scope: DueScope = Query(default=DueScope.now),
    limit: int | None = Query(default=None, ge=0, le=500),
    store: VocabStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_user_id),
) -> VocabListResponse:
    """Due items.

    - scope=now: 現在時刻までに due（期限の古い順、limit 件まで）
    - scope=today: 今日中に due になるもの（入力順）
    """
    session = VocabularySession.open(store, user_id, clock)
    if scope is DueScope.today:
        items = session.due_today()
        if limit is not None:
            items = items[:limit]
    else:
        items = session.review_queue(limit)
    return _list(items)


@router.get("/stats", response_model=VocabStats, summary="学習状況の集計")
def word_stats(
    store: VocabStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_user_id),
) -> VocabStats:
    return VocabularySession.open(store, user_id, clock).stats()


@router.get("/{item_id}", response_model=VocabItemView, summary="単語を取得")
def get_word(
    item_id: str,
    store: VocabStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_user_id),
) -> VocabItemView:
    return _view(VocabularySession.open(store, user_id, clock).get(item_id))


@router.patch("/{item_id}", response_model=VocabItemView, summary="表示テキストを更新")
def edit_word(
    item_id: str,
    req: WordUpdateRequest,
    store: VocabStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_user_id),
) -> VocabItemView:
    with user_lock(user_id):
        session = VocabularySession.open(store, user_id, clock)
        item = session.edit_word(
            item_id,
            translation=req.translation,
            example=req.example,
            phonetic=req.phonetic,
        )
        session.save()
    return _view(item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT, summary="単語を削除")
def delete_word(
    item_id: str,
    store: VocabStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_user_id),
) -> Response:
    with user_lock(user_id):
        session = VocabularySession.open(store, user_id, clock)
        session.delete_word(item_id)
        session.save()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{item_id}/review", response_model=ReviewResponse, summary="採点して次回出題日時を更新")
def review_word(
    item_id: str,
    req: ReviewRequest,
    store: VocabStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_user_id),
) -> ReviewResponse:
    """Grade an item with an SM-2 quality (0..5) or one of the four buttons."""
    # ReviewRequest が quality と button のどちらか一方だけを保証する。
    if req.button is not None:
        quality = map_button_to_quality(req.button)
    elif req.quality is not None:
        quality = req.quality
    else:
        raise InvalidArgumentError("exactly one of 'quality' or 'button' must be provided")
    with user_lock(user_id):
        session = VocabularySession.open(store, user_id, clock)
        item = session.review(item_id, quality)
        session.save()
    return ReviewResponse(
        item=_view(item),
        quality=quality,
        total_reviews_completed=session.total_reviews_completed,
    )

"""
Reading History Router

Remembers where a reader stopped and what they highlighted.
"""

import logging

from fastapi import APIRouter
from sqlalchemy import select

from digiread.dependencies import CurrentUser, DbSession, ensure_book_purchased
from digiread.models import History
from digiread.schemas.history import HistoryResponse, HistoryUpdate
from digiread.schemas.user import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/history",
    tags=["History"],
)


def find_history(db: DbSession, reader_id: int, book_id: int) -> History | None:
    stmt = select(History).where(
        History.reader_id == reader_id,
        History.book_id == book_id,
    )
    return db.execute(stmt).scalar_one_or_none()


@router.post(
    "",
    response_model=MessageResponse,
    summary="Update reading history",
    description="""
    Save the last location and highlights for a purchased book.

    - new highlights are appended
    - with remove=true, highlights with a matching selection are dropped
    """,
)
def update_history(
    history_data: HistoryUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> MessageResponse:
    ensure_book_purchased(current_user, history_data.book_id)

    incoming = [h.model_dump() for h in history_data.highlights]
    history = find_history(db, current_user.id, history_data.book_id)

    if history is None:
        history = History(
            reader_id=current_user.id,
            book_id=history_data.book_id,
            last_location=history_data.last_location,
            highlights=[] if history_data.remove else incoming,
        )
        db.add(history)
    else:
        if history_data.last_location:
            history.last_location = history_data.last_location

        # Reassign so the JSON column is flagged as changed
        if history_data.remove:
            removed = {h["selection"] for h in incoming}
            history.highlights = [
                h for h in history.highlights if h["selection"] not in removed
            ]
        elif incoming:
            history.highlights = [*history.highlights, *incoming]

    db.commit()

    return MessageResponse(message="History updated successfully")


@router.get(
    "/{book_id}",
    response_model=HistoryResponse,
    summary="Get reading history of a book",
)
def get_history(
    book_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> HistoryResponse:
    history = find_history(db, current_user.id, book_id)
    if history is None:
        return HistoryResponse(book_id=book_id)

    return HistoryResponse(
        book_id=book_id,
        last_location=history.last_location,
        highlights=history.highlights,
    )

"""AI coach routes: per-trade notes and the coaching chat."""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from tradejournal.api.deps import get_chat_repository, get_coach, get_journal_service
from tradejournal.services.ai.coach import NOTES_PLACEHOLDERS, TradeCoach
from tradejournal.services.journal.errors import PersistenceUnavailable
from tradejournal.services.journal.normalize import to_jsonable
from tradejournal.services.journal.service import JournalService
from tradejournal.services.journal.types import ChatMessage
from tradejournal.services.repository import ChatRepository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/coach", tags=["coach"])


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)


def _message_dict(m: ChatMessage) -> dict:
    return {"role": m.role, "content": m.content, "timestamp": to_jsonable(m.timestamp)}


@router.post("/trades/{trade_id}/notes")
async def trade_notes(
    trade_id: str,
    journal: JournalService = Depends(get_journal_service),
    coach: TradeCoach = Depends(get_coach),
):
    """Coach feedback for one trade, saved on the trade once generated."""
    trade = await journal.get_trade(trade_id)
    if trade.coach_notes:
        return {"trade_id": trade_id, "notes": trade.coach_notes, "saved": True}

    notes = await coach.trade_notes(trade, await journal.get_profile())
    if notes in NOTES_PLACEHOLDERS:
        return {"trade_id": trade_id, "notes": notes, "saved": False}
    await journal.save_coach_notes(trade_id, notes)
    return {"trade_id": trade_id, "notes": notes, "saved": True}


@router.post("/chat")
async def chat(
    req: ChatRequest,
    journal: JournalService = Depends(get_journal_service),
    chats: ChatRepository = Depends(get_chat_repository),
    coach: TradeCoach = Depends(get_coach),
):
    """Send a message to the coach. Both turns are appended to the saved history."""
    history = await chats.load()
    reply = await coach.chat(history, req.message, await journal.get_profile(), await journal.list_trades())

    updated = [*history, ChatMessage(role="user", content=req.message), ChatMessage(role="assistant", content=reply)]
    try:
        await chats.save(updated)
    except Exception as e:
        logger.error("Failed to save chat history: %s", e)
        raise PersistenceUnavailable(f"Could not save chat history: {e}") from e
    return {"reply": reply, "messages": [_message_dict(m) for m in updated[-2:]]}


@router.get("/history")
async def chat_history(chats: ChatRepository = Depends(get_chat_repository)):
    return {"messages": [_message_dict(m) for m in await chats.load()]}

"""Trader profile routes."""

from fastapi import APIRouter, Body, Depends

from tradejournal.api.deps import get_journal_service
from tradejournal.services.journal.normalize import normalize_profile, profile_to_dict
from tradejournal.services.journal.service import JournalService

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("")
async def get_profile(journal: JournalService = Depends(get_journal_service)):
    return profile_to_dict(await journal.get_profile())


@router.put("")
async def put_profile(payload: dict = Body(...), journal: JournalService = Depends(get_journal_service)):
    """Replace the profile. Unknown or malformed fields fall back to defaults."""
    profile = await journal.save_profile(normalize_profile(payload))
    return profile_to_dict(profile)

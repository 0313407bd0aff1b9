import aiosqlite
from fastapi import APIRouter, Depends

from qubrain.db.sqlite import get_db
from qubrain.models.flashcard import ReviewStats
from qubrain.models.user import User
from qubrain.services.auth import get_current_user
from qubrain.services.clock import Clock, get_clock
from qubrain.services.stats import review_stats

router = APIRouter()


@router.get("", response_model=ReviewStats)
async def get_stats(
    user: User = Depends(get_current_user),
    db: aiosqlite.Connection = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ReviewStats:
    """Cards per box, due by end of today, and reviewed since start of today."""
    return await review_stats(db, user.id, clock.now())

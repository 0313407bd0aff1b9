from qubrain.models.flashcard import (
    DueCards,
    Flashcard,
    FlashcardCreate,
    FlashcardList,
    FlashcardUpdate,
    IntervalTable,
    ReviewRequest,
    ReviewStats,
)
from qubrain.models.user import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    User,
    UserPublic,
)

__all__ = [
    "AuthResponse",
    "DueCards",
    "Flashcard",
    "FlashcardCreate",
    "FlashcardList",
    "FlashcardUpdate",
    "IntervalTable",
    "LoginRequest",
    "RegisterRequest",
    "ReviewRequest",
    "ReviewStats",
    "User",
    "UserPublic",
]

from src.database.repositories.giveaway_repository import (
    GiveawayPostRepository,
    GiveawayEntryRepository,
    WinnerHistoryRepository,
)

__all__ = ["GiveawayPostRepository", "GiveawayEntryRepository", "WinnerHistoryRepository"]

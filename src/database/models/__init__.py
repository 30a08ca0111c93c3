from src.database.models.giveaway_post import GiveawayPost
from src.database.models.giveaway_entry import GiveawayEntry
from src.database.models.winner_history import WinnerHistory

__all__ = ["GiveawayPost", "GiveawayEntry", "WinnerHistory"]

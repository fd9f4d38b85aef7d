from comments_picker.database.repositories.approved_group_repository import ApprovedGroupRepository
from comments_picker.database.repositories.giveaway_post_repository import GiveawayPostRepository
from comments_picker.database.repositories.entry_repository import EntryRepository
from comments_picker.database.repositories.winner_history_repository import (
    WinnerHistoryRepository,
    HistoryPage,
)

__all__ = [
    "ApprovedGroupRepository",
    "GiveawayPostRepository",
    "EntryRepository",
    "WinnerHistoryRepository",
    "HistoryPage",
]

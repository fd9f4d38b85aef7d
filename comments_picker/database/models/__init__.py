from comments_picker.database.models.approved_group import ApprovedGroup
from comments_picker.database.models.giveaway_post import GiveawayPost
from comments_picker.database.models.entry import Entry
from comments_picker.database.models.winner_history import WinnerHistory

__all__ = ["ApprovedGroup", "GiveawayPost", "Entry", "WinnerHistory"]

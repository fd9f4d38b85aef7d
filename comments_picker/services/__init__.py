from comments_picker.services.errors import GiveawayError, PreconditionNotMet, DrawFailed, Rejection
from comments_picker.services.giveaways import GiveawayService, PostRef, EntrySubmission
from comments_picker.services.selection import SelectionEngine, DrawPlan, DrawResult, DRAW_SECONDS

__all__ = [
    "GiveawayError",
    "PreconditionNotMet",
    "DrawFailed",
    "Rejection",
    "GiveawayService",
    "PostRef",
    "EntrySubmission",
    "SelectionEngine",
    "DrawPlan",
    "DrawResult",
    "DRAW_SECONDS",
]

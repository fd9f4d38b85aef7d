from enum import Enum


class Rejection(str, Enum):
    WRONG_CHAT = "wrong_chat"
    NOT_OWNER = "not_owner"
    NOT_APPROVED = "not_approved"
    NOT_ADMIN = "not_admin"
    NOT_A_REPLY = "not_a_reply"
    POST_UNAVAILABLE = "post_unavailable"
    GROUP_MISMATCH = "group_mismatch"
    NO_ENTRIES = "no_entries"
    DRAW_IN_PROGRESS = "draw_in_progress"


class GiveawayError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class PreconditionNotMet(GiveawayError):
    """Команду нельзя выполнить; состояние не менялось"""

    def __init__(self, reason: Rejection):
        self.reason = reason
        super().__init__(f"precondition not met: {reason.value}")


class DrawFailed(GiveawayError):
    """Розыгрыш сорвался после отсчета; захват поста уже снят"""

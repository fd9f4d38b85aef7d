from sqlalchemy import Column, String, Integer, BigInteger, Text, DateTime

from comments_picker.database.db import Base
from comments_picker.utils.helpers import utcnow


class WinnerHistory(Base):
    __tablename__ = "winner_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(BigInteger, nullable=False)
    channel_id = Column(BigInteger, nullable=False)
    channel_post_id = Column(BigInteger, nullable=False)

    winner_user_id = Column(BigInteger, nullable=False)
    winner_username = Column(String, nullable=True)
    winner_name = Column(String, nullable=True)
    winner_comment = Column(Text, nullable=True)

    picked_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<WinnerHistory(group_id={self.group_id}, winner_user_id={self.winner_user_id})>"

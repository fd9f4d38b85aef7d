from sqlalchemy import Column, String, Integer, BigInteger, Text, DateTime, UniqueConstraint

from comments_picker.database.db import Base
from comments_picker.utils.helpers import utcnow


class Entry(Base):
    __tablename__ = "entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(BigInteger, nullable=False)
    channel_id = Column(BigInteger, nullable=False)
    channel_post_id = Column(BigInteger, nullable=False)

    user_id = Column(BigInteger, nullable=False)
    username = Column(String, nullable=True)
    display_name = Column(String, nullable=False)

    comment = Column(Text, nullable=False, default="")
    comment_message_id = Column(BigInteger, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Один пользователь = одна заявка на пост. Ограничение и есть защита от гонки
    __table_args__ = (
        UniqueConstraint('group_id', 'channel_id', 'channel_post_id', 'user_id', name='uq_entry_user_post'),
    )

    @property
    def rolling_name(self) -> str:
        return f"@{self.username}" if self.username else (self.display_name or "User")

    def __repr__(self):
        return f"<Entry(group_id={self.group_id}, channel_post_id={self.channel_post_id}, user_id={self.user_id})>"

from sqlalchemy import Column, String, Integer, BigInteger, Boolean, DateTime, UniqueConstraint

from comments_picker.database.db import Base
from comments_picker.utils.helpers import utcnow


class GiveawayPost(Base):
    __tablename__ = "giveaway_posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    channel_id = Column(BigInteger, nullable=False)
    channel_post_id = Column(BigInteger, nullable=False)
    discussion_group_id = Column(BigInteger, nullable=True)  # Связанная группа (может быть неизвестна)
    mention_tag = Column(String, nullable=True)

    picked = Column(Boolean, nullable=False, default=False)
    picked_at = Column(DateTime(timezone=True), nullable=True)
    drawing_started_at = Column(DateTime(timezone=True), nullable=True)  # Захват поста на время розыгрыша

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('channel_id', 'channel_post_id', name='uq_giveaway_post'),
    )

    def accepts_group(self, group_id: int) -> bool:
        """Если связанная группа известна, она должна совпадать"""
        return self.discussion_group_id is None or self.discussion_group_id == group_id

    def __repr__(self):
        return (
            f"<GiveawayPost(channel_id={self.channel_id}, channel_post_id={self.channel_post_id}, "
            f"picked={self.picked})>"
        )

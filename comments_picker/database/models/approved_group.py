from sqlalchemy import Column, BigInteger, DateTime

from comments_picker.database.db import Base
from comments_picker.utils.helpers import utcnow


class ApprovedGroup(Base):
    __tablename__ = "approved_groups"

    group_id = Column(BigInteger, primary_key=True, autoincrement=False)  # ID группы обсуждения
    approved_by = Column(BigInteger, nullable=False)  # ID владельца, который одобрил группу
    approved_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<ApprovedGroup(group_id={self.group_id}, approved_by={self.approved_by})>"

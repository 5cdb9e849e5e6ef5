from sqlalchemy import JSON, BigInteger, Column, Index, Integer, String

from database import Base


class SettlementList(Base):
    """A state upgraded out of the share link, stored under a ULID"""
    __tablename__ = "settlement_lists"

    id = Column(String(26), primary_key=True)
    data = Column(JSON, nullable=False)  # AppState in its wire form
    version = Column(Integer, nullable=False, default=1)  # optimistic-lock token
    created_at = Column(BigInteger, nullable=False)  # ms since epoch
    updated_at = Column(BigInteger, nullable=False)

    __table_args__ = (Index("idx_settlement_lists_created_at", "created_at"),)

import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, Text, UniqueConstraint, Uuid

from app.database import Base


class DatasetEntry(Base):
    __tablename__ = "dataset_entries"
    # Soft-deleted rows keep their (category, key) reserved.
    __table_args__ = (UniqueConstraint("category", "key", name="uq_dataset_entries_category_key"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    category = Column(Text, nullable=False, index=True)
    key = Column(Text, nullable=False, index=True)
    response = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Text)

    usage_count = Column(Integer, nullable=False, default=0)
    last_used_at = Column(DateTime(timezone=True))

    confidence = Column(Float, nullable=False, default=1.0)
    tags = Column(JSON, nullable=False, default=list)
    priority = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))

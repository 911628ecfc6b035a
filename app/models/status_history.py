"""
Status History Model
Append-only audit trail of application and offer status transitions.
"""
from sqlalchemy import String, Integer, Text, Index

from app import db
from app.models import BaseModel


class HistoryEntity:
    """Entity types recorded in the status history."""
    APPLICATION = "APPLICATION"
    OFFER = "OFFER"

    @classmethod
    def all(cls) -> list[str]:
        return [cls.APPLICATION, cls.OFFER]


class StatusHistory(BaseModel):
    """One row per status transition. Rows are never updated or deleted."""

    __tablename__ = "status_history"

    tenant_id = db.Column(Integer, nullable=False, index=True)
    entity_type = db.Column(String(20), nullable=False)
    entity_id = db.Column(Integer, nullable=False)

    from_status = db.Column(String(20))  # None for the creation entry
    to_status = db.Column(String(20), nullable=False)
    changed_by = db.Column(String(255))
    changed_by_id = db.Column(Integer)
    reason = db.Column(Text)

    __table_args__ = (
        Index("idx_status_history_entity", "tenant_id", "entity_type", "entity_id"),
    )

    @classmethod
    def record(
        cls,
        tenant_id: int,
        entity_type: str,
        entity_id: int,
        from_status: str | None,
        to_status: str,
        changed_by: str | None = None,
        changed_by_id: int | None = None,
        reason: str | None = None,
    ) -> "StatusHistory":
        """Create a transition entry."""
        return cls(
            tenant_id=tenant_id,
            entity_type=entity_type,
            entity_id=entity_id,
            from_status=from_status,
            to_status=to_status,
            changed_by=changed_by,
            changed_by_id=changed_by_id,
            reason=reason or (
                f"Status changed from {from_status} to {to_status}" if from_status else None
            ),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "changed_by": self.changed_by,
            "changed_by_id": self.changed_by_id,
            "reason": self.reason,
            "timestamp": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<StatusHistory {self.entity_type}:{self.entity_id} {self.from_status}->{self.to_status}>"

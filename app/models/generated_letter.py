"""
Generated Letter Model
Append-only record of each successful letter render.
"""
from sqlalchemy import String, Integer, ForeignKey, Index

from app import db
from app.models import BaseModel


class GeneratedLetter(BaseModel):
    __tablename__ = "generated_letters"

    tenant_id = db.Column(Integer, nullable=False, index=True)
    application_id = db.Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False
    )
    template_id = db.Column(Integer, ForeignKey("letter_templates.id", ondelete="SET NULL"))

    letter_type = db.Column(String(20), nullable=False)
    template_type = db.Column(String(20), nullable=False)
    docx_path = db.Column(String(500))
    pdf_path = db.Column(String(500), nullable=False)
    pdf_url = db.Column(String(500), nullable=False)
    status = db.Column(String(20), nullable=False, default="generated")
    generated_by = db.Column(String(255))
    # Placeholder values used for this render
    snapshot_data = db.Column(db.JSON, nullable=False, default=dict)

    __table_args__ = (
        Index("idx_generated_letter_application", "tenant_id", "application_id"),
    )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "application_id": self.application_id,
            "template_id": self.template_id,
            "letter_type": self.letter_type,
            "template_type": self.template_type,
            "pdf_path": self.pdf_path,
            "pdf_url": self.pdf_url,
            "download_url": self.pdf_url,
            "status": self.status,
            "generated_by": self.generated_by,
            "snapshot_data": self.snapshot_data,
        })
        return data

    def __repr__(self):
        return f"<GeneratedLetter {self.letter_type} application={self.application_id}>"

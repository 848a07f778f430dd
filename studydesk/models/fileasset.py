# studydesk/models/fileasset.py
from datetime import datetime
from ..extensions import db


class FileAsset(db.Model):
    __tablename__ = "files"

    id = db.Column(db.Integer, primary_key=True)

    # who uploaded/owns the file (user)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # public path of the stored upload, e.g. /uploads/1700000000000-ab12cd34-report.pdf
    filename = db.Column(db.String(512), nullable=False)
    category = db.Column(db.String(50), index=True)
    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "filename": self.filename,
            "category": self.category,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
        }

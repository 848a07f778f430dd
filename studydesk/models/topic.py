# studydesk/models/topic.py
from ..extensions import db


class Topic(db.Model):
    """Shared catalog entry; not owned by any user."""

    __tablename__ = "topics"

    id = db.Column(db.Integer, primary_key=True)
    subject = db.Column(db.String(160), nullable=False, index=True)
    subtopic = db.Column(db.String(160), nullable=False)
    explanation = db.Column(db.Text, nullable=False)
    image = db.Column(db.String(512))
    link = db.Column(db.String(2048))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "subject": self.subject,
            "subtopic": self.subtopic,
            "explanation": self.explanation,
            "image": self.image,
            "link": self.link,
        }

# studydesk/models/resource.py
from ..extensions import db


class Resource(db.Model):
    __tablename__ = "resources"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    title = db.Column(db.String(200), nullable=False)
    link = db.Column(db.String(2048), nullable=False)
    image = db.Column(db.String(512))  # optional uploaded image path

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "link": self.link,
            "image": self.image,
        }

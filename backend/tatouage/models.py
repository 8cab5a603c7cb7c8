# Database models (ImageRecord, UserRecord)
import uuid
from datetime import datetime, timezone

from . import db


def generate_uuid():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


class ImageRecord(db.Model):
    __tablename__ = 'images'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    original_name = db.Column(db.String(255), nullable=False)
    watermarked_name = db.Column(db.String(512), nullable=False)
    # "metadata" is reserved on declarative models, hence the attribute name
    token = db.Column('metadata', db.Text, nullable=False)
    image_data = db.Column(db.LargeBinary(length=2 ** 32 - 1), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f'<ImageRecord {self.id} file={self.watermarked_name}>'


class UserRecord(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    username = db.Column(db.String(80), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    type_u = db.Column(db.String(50), nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    created_by = db.Column(db.String(80), nullable=True)

    def __repr__(self):
        return f'<UserRecord {self.username}>'

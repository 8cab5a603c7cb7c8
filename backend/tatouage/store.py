# Persistence for image and user records

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .errors import AmbiguousAccount, DuplicateAccount, NotFound, StoreError
from .models import ImageRecord, UserRecord, generate_uuid

log = logging.getLogger(__name__)


class RecordStore:
    """Image and user persistence over an injected SQLAlchemy session.

    Every operation is a single statement committed on its own.
    """

    def __init__(self, session):
        self.session = session

    def _commit(self, what):
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            log.exception(f'Failed to {what}')
            raise StoreError(f'Failed to {what}') from e

    def _query(self, stmt, what):
        try:
            return self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            self.session.rollback()
            log.exception(f'Failed to {what}')
            raise StoreError(f'Failed to {what}') from e

    # --- images ---

    def create_image(self, record: ImageRecord) -> str:
        if not record.id:
            record.id = generate_uuid()
        self.session.add(record)
        try:
            self._commit('store image')
        except IntegrityError as e:
            raise StoreError('Failed to store image') from e
        log.debug(f'Stored image record {record.id}')
        return record.id

    def list_images(self):
        stmt = select(ImageRecord).order_by(ImageRecord.created_at, ImageRecord.id)
        return self._query(stmt, 'list images')

    def get_image(self, image_id: str) -> ImageRecord:
        rows = self._query(select(ImageRecord).where(ImageRecord.id == image_id), 'load image')
        if not rows:
            raise NotFound('Image not found')
        return rows[0]

    def delete_image(self, image_id: str) -> None:
        record = self.get_image(image_id)
        self.session.delete(record)
        self._commit('delete image')
        log.debug(f'Deleted image record {image_id}')

    # --- users ---

    def create_user(self, record: UserRecord) -> str:
        if not record.id:
            record.id = generate_uuid()
        self.session.add(record)
        try:
            self._commit('create user')
        except IntegrityError as e:
            raise DuplicateAccount() from e
        return record.id

    def find_user_by_email(self, email: str):
        rows = self._query(select(UserRecord).where(UserRecord.email == email).limit(2), 'look up user')
        if len(rows) > 1:
            raise AmbiguousAccount()
        return rows[0] if rows else None

# Password hashing, signup and login

import logging

from flask_jwt_extended import create_access_token
from werkzeug.security import check_password_hash, generate_password_hash

from .errors import InvalidCredentials, NotFound, ValidationError
from .models import UserRecord

log = logging.getLogger(__name__)


# --- Hashing ---

def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


# --- Accounts ---

class AuthService:
    """Registers users and issues signed session tokens.

    The signing secret is the app's ``JWT_SECRET_KEY``; tokens are created
    by Flask-JWT-Extended, so calls need an application context.
    """

    def __init__(self, store):
        self.store = store

    def signup(self, username, email, type_u, password, created_by=None) -> str:
        missing = [name for name, value in (('username', username), ('email', email), ('password', password))
                   if not value]
        if missing:
            raise ValidationError(f'Missing required fields: {", ".join(missing)}')

        user = UserRecord(
            username=username,
            email=email,
            type_u=type_u,
            password_hash=hash_password(password),
            created_by=created_by,
        )
        user_id = self.store.create_user(user)
        log.info(f'Created user {user_id}')
        return user_id

    def login(self, email, password) -> dict:
        if not email or not password:
            raise ValidationError('Missing email or password')

        user = self.store.find_user_by_email(email)
        if user is None:
            raise NotFound('User not found')
        if not verify_password(password, user.password_hash):
            log.info(f'Rejected login for user {user.id}')
            raise InvalidCredentials()

        token = create_access_token(identity=user.id, additional_claims={'username': user.username})
        return {'token': token, 'userId': user.id, 'userName': user.username}

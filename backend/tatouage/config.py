# Configuration settings
import os
from dotenv import load_dotenv
from sqlalchemy.engine import URL

# This line loads the variables from your .env file
load_dotenv()


def _database_uri():
    url = os.environ.get('DATABASE_URL')
    if url:
        return url
    host = os.environ.get('DB_HOST')
    if host:
        # Credentials must come from the environment, there is no fallback
        missing = [v for v in ('DB_USER', 'DB_PASSWORD', 'DB_NAME') if not os.environ.get(v)]
        if missing:
            raise RuntimeError(f'DB_HOST is set but {", ".join(missing)} must be set in the environment')
        return URL.create(
            'mysql+pymysql',
            username=os.environ['DB_USER'],
            password=os.environ['DB_PASSWORD'],
            host=host,
            port=int(os.environ.get('DB_PORT', 3306)),
            database=os.environ['DB_NAME'],
        ).render_as_string(hide_password=False)
    return 'sqlite:///' + os.path.join(os.getcwd(), 'tatouage.db')


# This class holds all the configuration variables for the app
class Config:
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY')
    SECRET_KEY = os.environ.get('SECRET_KEY', JWT_SECRET_KEY)
    JWT_ACCESS_TOKEN_EXPIRES_MINUTES = int(os.environ.get('JWT_ACCESS_TOKEN_EXPIRES_MINUTES', 60))

    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'uploads'))
    TEMP_FOLDER = os.environ.get('TEMP_FOLDER', os.path.join(os.getcwd(), 'tmp'))
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 16 * 1024 * 1024))

    DEFAULT_TOKEN = os.environ.get('DEFAULT_TOKEN', 'ID_Patient:12345')
    METADATA_TIMEOUT_SECONDS = float(os.environ.get('METADATA_TIMEOUT_SECONDS', 10))

    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', '*').split(',')]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

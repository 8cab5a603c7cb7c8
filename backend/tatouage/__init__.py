# Creates the Flask app (App Factory)
from datetime import timedelta
import logging
import os

from flask import Flask
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_sqlalchemy import SQLAlchemy

from .config import Config

# Extensions, bound to the app in create_app
db = SQLAlchemy()
jwt = JWTManager()


# Application Factory Function
def create_app(overrides=None):
    app = Flask(__name__, static_folder=None)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    if not app.config.get('JWT_SECRET_KEY'):
        raise RuntimeError('JWT_SECRET_KEY must be set in the environment')
    if not app.config.get('SECRET_KEY'):
        app.config['SECRET_KEY'] = app.config['JWT_SECRET_KEY']
    app.config.setdefault(
        'JWT_ACCESS_TOKEN_EXPIRES', timedelta(minutes=app.config['JWT_ACCESS_TOKEN_EXPIRES_MINUTES']))

    # Logging configuration
    logging.basicConfig(level=app.config['LOG_LEVEL'],
                        format='%(asctime)s %(levelname)s %(name)s - %(message)s')
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Ensure folders exist
    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)
    os.makedirs(app.config['TEMP_FOLDER'], exist_ok=True)

    # Extensions
    db.init_app(app)
    jwt.init_app(app)
    CORS(app, resources={r"/*": {"origins": app.config['CORS_ORIGINS']}})

    from .watermark import WatermarkService
    app.extensions['watermark'] = WatermarkService(
        timeout=app.config['METADATA_TIMEOUT_SECONDS'],
        default_token=app.config['DEFAULT_TOKEN'],
    )

    # Import and register the blueprint from routes.py
    from .routes import api as api_blueprint
    app.register_blueprint(api_blueprint)

    app.logger.debug('Application created and configured')
    return app

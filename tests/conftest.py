import io

import pytest
from PIL import Image

from tatouage import create_app, db


def make_image(path=None, fmt='PNG', size=(16, 12), color=(200, 30, 90)):
    """Write a small solid image to ``path`` or return its bytes."""
    mode = 'RGBA' if fmt == 'PNG' else 'RGB'
    img = Image.new(mode, size, color)
    if path is not None:
        img.save(path, format=fmt)
        return path
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'JWT_SECRET_KEY': 'test-signing-key-with-enough-length-1234',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///' + str(tmp_path / 'test.db'),
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'TEMP_FOLDER': str(tmp_path / 'tmp'),
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def png_file(tmp_path):
    return str(make_image(tmp_path / 'cover.png', 'PNG'))


@pytest.fixture
def jpeg_file(tmp_path):
    return str(make_image(tmp_path / 'cover.jpg', 'JPEG'))

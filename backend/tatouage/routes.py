# All API routes are in this one file
import base64
import io
import mimetypes
import os
import time
import uuid

from flask import Blueprint, Response, current_app, jsonify, request, send_file
from flask_jwt_extended import get_jwt_identity, jwt_required
from werkzeug.exceptions import HTTPException
from werkzeug.utils import secure_filename

from . import db, metadata
from .errors import NotFound, TatouageError, ValidationError
from .models import ImageRecord
from .security import AuthService
from .store import RecordStore
from .transcode import normalize_format, transcode

api = Blueprint('api', __name__)


def _store():
    return RecordStore(db.session)


def _watermarker():
    return current_app.extensions['watermark']


def _uploaded_image():
    file = request.files.get('image')
    if not file or file.filename == '':
        raise ValidationError('No file uploaded')
    return file


def _json_body():
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError('Request body must be a JSON object')
    return body


def _extension(mimetype, path):
    if mimetype and mimetype.startswith('image/'):
        return mimetype.split('/')[1]
    return metadata.detect_format(path).lower()


def _resolve_upload_path(path):
    """Resolve a client supplied path, refusing anything outside the upload folder."""
    if not path:
        raise ValidationError('Missing path')
    root = os.path.realpath(current_app.config['UPLOAD_FOLDER'])
    candidate = os.path.realpath(path)
    if not os.path.isfile(candidate) and not os.path.isabs(path):
        candidate = os.path.realpath(os.path.join(root, path))
    if os.path.commonpath([root, candidate]) != root or not os.path.isfile(candidate):
        raise NotFound('File not found')
    return candidate


@api.app_errorhandler(TatouageError)
def handle_service_error(e):
    current_app.logger.warning(f'{request.method} {request.path} failed: {e.message}')
    return jsonify({'message': e.message}), e.status_code


@api.app_errorhandler(Exception)
def handle_unexpected_error(e):
    # App level, so the JWT extension's handlers for token errors take precedence
    if isinstance(e, HTTPException):
        return e
    current_app.logger.exception(f'Unhandled error on {request.method} {request.path}')
    return jsonify({'message': 'Internal server error'}), 500


@api.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok'}), 200


# --- Accounts ---

@api.route('/signup', methods=['POST'])
def signup():
    current_app.logger.debug('POST /signup invoked')
    body = _json_body()
    user_id = AuthService(_store()).signup(
        body.get('username'),
        body.get('email'),
        body.get('type_u'),
        body.get('password'),
        body.get('create_by'),
    )
    return jsonify({'message': 'User created successfully', 'createdUserId': user_id}), 201


@api.route('/login', methods=['POST'])
def login():
    current_app.logger.debug('POST /login invoked')
    body = _json_body()
    session = AuthService(_store()).login(body.get('email'), body.get('password'))
    return jsonify(session), 200


# --- Images ---

@api.route('/upload', methods=['POST'])
@jwt_required(optional=True)
def upload():
    current_app.logger.debug('POST /upload invoked')
    file = _uploaded_image()
    token = request.form.get('metadata') or current_app.config['DEFAULT_TOKEN']
    upload_folder = current_app.config['UPLOAD_FOLDER']

    original_name = file.filename
    # Timestamp plus a random fragment, so concurrent uploads never share a path
    filename = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}-{secure_filename(original_name) or 'image'}"
    upload_path = os.path.join(upload_folder, filename)
    file.save(upload_path)
    current_app.logger.debug(f'Uploaded file saved to {upload_path} (user={get_jwt_identity()})')

    base_name = os.path.splitext(filename)[0]
    extension = _extension(file.mimetype, upload_path)
    watermarked_path = os.path.join(upload_folder, f'tatouee_{base_name}.{extension}')
    payload = _watermarker().watermark(upload_path, token, watermarked_path)
    image_id = _store().create_image(ImageRecord(
        original_name=original_name,
        watermarked_name=watermarked_path,
        token=token,
        image_data=payload,
    ))

    return jsonify({
        'message': 'File uploaded and watermarked successfully',
        'original': upload_path,
        'watermarked': watermarked_path,
        'metadata': token,
        'imageId': image_id,
    }), 200


@api.route('/verify', methods=['POST'])
def verify():
    current_app.logger.debug('POST /verify invoked')
    file = _uploaded_image()
    temp_path = os.path.join(
        current_app.config['TEMP_FOLDER'], f'_verify_{uuid.uuid4().hex}_{secure_filename(file.filename)}')
    file.save(temp_path)
    try:
        token = _watermarker().verify(temp_path)
    finally:
        os.remove(temp_path)
    return jsonify({'message': 'Metadata extracted successfully', 'metadata': token}), 200


@api.route('/images', methods=['GET'])
def list_images():
    images = [{
        'id': r.id,
        'original_name': r.original_name,
        'watermarked_name': r.watermarked_name,
        'metadata': r.token,
        'image_data': base64.b64encode(r.image_data).decode('ascii'),
        'created_at': r.created_at.isoformat() if r.created_at else None,
    } for r in _store().list_images()]
    return jsonify({'message': 'Images retrieved successfully', 'images': images}), 200


@api.route('/images/<image_id>/download', methods=['GET'])
def download_image(image_id):
    record = _store().get_image(image_id)
    name = os.path.basename(record.watermarked_name)
    mimetype = mimetypes.guess_type(name)[0] or 'application/octet-stream'
    return send_file(io.BytesIO(record.image_data), mimetype=mimetype,
                     as_attachment=True, download_name=name)


@api.route('/images/<image_id>', methods=['DELETE'])
def delete_image(image_id):
    _store().delete_image(image_id)
    current_app.logger.info(f'Deleted image {image_id}')
    return jsonify({'message': 'Image deleted successfully'}), 200


@api.route('/export', methods=['GET'])
def export():
    fmt = request.args.get('format') or 'png'
    encoder = normalize_format(fmt)
    path = _resolve_upload_path(request.args.get('path'))
    data = transcode(path, fmt)
    return Response(data, mimetype=f'image/{encoder.lower()}')

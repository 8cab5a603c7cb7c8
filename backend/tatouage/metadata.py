# Reads and writes the watermark token in image metadata

import logging
import os

import piexif
import piexif.helper
from PIL import Image, PngImagePlugin, UnidentifiedImageError

from .errors import CodecError, NotFound

log = logging.getLogger(__name__)

# PNG text key, mirrors the EXIF field name
FIELD = 'UserComment'

EXIF_FORMATS = {'JPEG', 'WEBP'}


def detect_format(path: str) -> str:
    """Return the Pillow format name of the image at ``path``."""
    _require(path)
    try:
        with Image.open(path) as img:
            return img.format
    except (UnidentifiedImageError, OSError) as e:
        raise CodecError(f'Unreadable image: {e}') from e


def write(path: str, token: str) -> None:
    """Store ``token`` in the comment field of the image at ``path``.

    JPEG and WebP carry it in EXIF UserComment, inserted without touching
    the compressed image data. PNG carries it in a text chunk.
    """
    fmt = detect_format(path)
    log.debug(f'Writing token into {fmt} file {path}')
    if fmt in EXIF_FORMATS:
        _write_exif(path, token)
    elif fmt == 'PNG':
        _write_png(path, token)
    else:
        raise CodecError(f'Cannot store metadata in {fmt} images')


def read(path: str):
    """Return the token stored in the image at ``path``, or None."""
    fmt = detect_format(path)
    if fmt in EXIF_FORMATS:
        token = _read_exif(path)
    elif fmt == 'PNG':
        token = _read_png(path)
    else:
        # No comment field in this container, so nothing can be stored there
        token = None
    log.debug(f'Read token from {path}: found={token is not None}')
    return token


def _require(path):
    if not os.path.isfile(path):
        raise NotFound(f'File not found: {os.path.basename(path)}')


# --- EXIF (JPEG, WebP) ---

def _load_exif(path):
    try:
        return piexif.load(path)
    except piexif.InvalidImageDataError:
        raise
    except ValueError:
        # WebP files without an EXIF chunk
        return {'0th': {}, 'Exif': {}, 'GPS': {}, 'Interop': {}, '1st': {}, 'thumbnail': None}


def _write_exif(path, token):
    try:
        exif = _load_exif(path)
        exif['Exif'][piexif.ExifIFD.UserComment] = piexif.helper.UserComment.dump(token, encoding='unicode')
        piexif.insert(piexif.dump(exif), path)
    except Exception as e:
        raise CodecError(f'EXIF write failed: {e}') from e


def _read_exif(path):
    try:
        exif = _load_exif(path)
    except Exception as e:
        raise CodecError(f'EXIF read failed: {e}') from e
    raw = exif.get('Exif', {}).get(piexif.ExifIFD.UserComment)
    if raw is None:
        return None
    try:
        return piexif.helper.UserComment.load(raw)
    except ValueError:
        # Comment written by another tool without a charset prefix
        return raw.decode('utf-8', errors='replace').rstrip('\x00')


# --- PNG text chunks ---

def _write_png(path, token):
    try:
        with Image.open(path) as img:
            img.load()
            texts = dict(img.text)
            params = {k: img.info[k] for k in ('icc_profile', 'dpi', 'exif', 'transparency') if k in img.info}
            out = img.copy()
        info = PngImagePlugin.PngInfo()
        for key, value in texts.items():
            if key != FIELD:
                info.add_text(key, value)
        info.add_text(FIELD, token)
        out.save(path, format='PNG', pnginfo=info, **params)
    except OSError as e:
        raise CodecError(f'PNG write failed: {e}') from e


def _read_png(path):
    try:
        with Image.open(path) as img:
            return img.text.get(FIELD)
    except OSError as e:
        raise CodecError(f'PNG read failed: {e}') from e

# Re-encodes stored images for export

import io
import logging
import os

from PIL import Image, UnidentifiedImageError

from .errors import CodecError, NotFound, UnsupportedFormat

log = logging.getLogger(__name__)

ALIASES = {'jpg': 'jpeg', 'tif': 'tiff'}

# Raster encoders offered for export
RASTER_FORMATS = {'PNG', 'JPEG', 'WEBP', 'GIF', 'BMP', 'TIFF'}

# Formats without an alpha channel or palette support
RGB_ONLY = {'JPEG', 'BMP'}


def normalize_format(target_format: str) -> str:
    """Map a user supplied format name to the Pillow encoder name."""
    name = (target_format or '').strip().lower()
    name = ALIASES.get(name, name)
    Image.init()
    encoder = name.upper()
    if encoder not in RASTER_FORMATS or encoder not in Image.SAVE:
        raise UnsupportedFormat(f'Unsupported format: {target_format}')
    return encoder


def transcode(path: str, target_format: str) -> bytes:
    """Decode the image at ``path`` and re-encode it as ``target_format``.

    Embedded metadata is not carried over.
    """
    encoder = normalize_format(target_format)
    if not os.path.isfile(path):
        raise NotFound(f'File not found: {os.path.basename(path)}')

    try:
        with Image.open(path) as img:
            img.load()
            if encoder in RGB_ONLY and img.mode not in ('RGB', 'L'):
                img = img.convert('RGB')
            output = io.BytesIO()
            img.save(output, format=encoder)
    except UnidentifiedImageError as e:
        raise CodecError(f'Unreadable image: {e}') from e
    except (OSError, ValueError) as e:
        raise UnsupportedFormat(f'Cannot encode image as {target_format}: {e}') from e

    data = output.getvalue()
    log.debug(f'Transcoded {path} to {encoder}: {len(data)} bytes')
    return data

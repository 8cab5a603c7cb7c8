import io

import pytest
from PIL import Image

from tatouage.errors import NotFound, UnsupportedFormat
from tatouage.transcode import normalize_format, transcode


@pytest.mark.parametrize('name,expected', [('png', 'PNG'), ('JPEG', 'JPEG'), ('jpg', 'JPEG'), ('webp', 'WEBP')])
def test_normalize_format(name, expected):
    assert normalize_format(name) == expected


@pytest.mark.parametrize('name', ['', 'docx', 'not-a-format', 'pdf', 'PDF'])
def test_normalize_format_rejects_unknown(name):
    with pytest.raises(UnsupportedFormat):
        normalize_format(name)


def test_png_with_alpha_to_jpeg(png_file):
    data = transcode(png_file, 'jpeg')
    with Image.open(io.BytesIO(data)) as img:
        assert img.format == 'JPEG'
        assert img.size == (16, 12)


def test_jpeg_to_png_keeps_size(jpeg_file):
    data = transcode(jpeg_file, 'png')
    with Image.open(io.BytesIO(data)) as img:
        assert img.format == 'PNG'
        assert img.size == (16, 12)


def test_missing_file(tmp_path):
    with pytest.raises(NotFound):
        transcode(str(tmp_path / 'missing.png'), 'png')


def test_unsupported_format_checked_first(tmp_path):
    with pytest.raises(UnsupportedFormat):
        transcode(str(tmp_path / 'missing.png'), 'docx')

"""
test_engine.py
--------------

Real qrcode/Pillow rendering.
"""

import pytest
import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_M

from qrbatch.engine import QREngine, QRStyle
from qrbatch.errors import EncodeError


@pytest.fixture
def engine():
    return QREngine(QRStyle())


@pytest.mark.parametrize("size", [128, 256, 300])
def test_generate_is_square_of_requested_size(engine, size):
    img = engine.generate("hello", "M", size)
    assert img.size == (size, size)


def test_write_file_png(engine, tmp_path):
    dest = tmp_path / "alice.png"
    engine.write_file("123", "M", 256, dest)
    with Image.open(dest) as img:
        assert img.format == "PNG"
        assert img.size == (256, 256)


def test_write_file_jpeg_by_extension(engine, tmp_path):
    dest = tmp_path / "alice.jpg"
    engine(  # encoder call signature
        "123", "H", 200, dest)
    with Image.open(dest) as img:
        assert img.format == "JPEG"


def test_same_payload_gives_same_bytes(engine, tmp_path):
    a, b = tmp_path / "a.png", tmp_path / "b.png"
    engine.write_file("payload", "Q", 256, a)
    engine.write_file("payload", "Q", 256, b)
    assert a.read_bytes() == b.read_bytes()


def test_empty_payload_rejected(engine):
    with pytest.raises(EncodeError):
        engine.generate("", "M", 256)


def test_unknown_level_rejected(engine):
    with pytest.raises(EncodeError):
        engine.generate("x", "Z", 256)


def test_payload_too_long_rejected(engine):
    with pytest.raises(EncodeError):
        engine.generate("x" * 5000, "H", 256)


def test_missing_folder_raises(engine, tmp_path):
    with pytest.raises(EncodeError):
        engine.write_file("x", "M", 64, tmp_path / "nope" / "x.png")


def test_small_pixel_size_keeps_every_module(engine):
    img = engine.generate("x" * 600, "M", 64)

    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, border=4)
    qr.add_data("x" * 600)
    qr.make(fit=True)
    assert img.size[0] >= qr.modules_count + 2 * 4
    assert img.size[0] == img.size[1]


def test_pixel_size_at_module_count_is_honoured(engine):
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, border=4)
    qr.add_data("hi")
    qr.make(fit=True)
    size = qr.modules_count + 2 * 4
    assert engine.generate("hi", "M", size).size == (size, size)

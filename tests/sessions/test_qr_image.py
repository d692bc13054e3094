from __future__ import annotations

import io
import json

import pytest
from PIL import Image

from src.qr_attendance.qr_attendance.core.exceptions import MalformedToken
from src.qr_attendance.qr_attendance.sessions.qr_image import decode_image, render_png


def _token() -> str:
    return json.dumps(
        {"courseId": "CS101", "teacherId": "drsmith", "teacherName": "Dr Smith", "expiry": 1770000000000},
        separators=(",", ":"),
    )


def test_render_png_is_a_png():
    png = render_png(_token())
    assert png.startswith(b"\x89PNG")
    assert Image.open(io.BytesIO(png)).size[0] > 0


def test_non_image_upload_is_malformed():
    with pytest.raises(MalformedToken) as exc:
        decode_image(io.BytesIO(b"definitely not an image"))
    assert exc.value.reason == "MALFORMED_TOKEN"


def test_rendered_qr_decodes_back_to_the_token():
    pytest.importorskip("pyzbar.pyzbar")
    token = _token()
    assert decode_image(io.BytesIO(render_png(token))) == token


def test_image_without_qr_is_malformed():
    pytest.importorskip("pyzbar.pyzbar")
    buf = io.BytesIO()
    Image.new("RGB", (120, 120), "white").save(buf, format="PNG")
    buf.seek(0)

    with pytest.raises(MalformedToken):
        decode_image(buf)

"""Barcode text generation and Code 128 PNG rendering."""

from __future__ import annotations

import base64
import secrets
import struct
import zlib
from datetime import datetime

_IMAGE_WIDTH = 300
_IMAGE_HEIGHT = 100

# Bar/space widths of every Code 128 symbol, indexed by symbol value.
_PATTERNS = (
    "212222", "222122", "222221", "121223", "121322", "131222", "122213",
    "122312", "132212", "221213", "221312", "231212", "112232", "122132",
    "122231", "113222", "123122", "123221", "223211", "221132", "221231",
    "213212", "223112", "312131", "311222", "321122", "321221", "312212",
    "322112", "322211", "212123", "212321", "232121", "111323", "131123",
    "131321", "112313", "132113", "132311", "211313", "231113", "231311",
    "112133", "112331", "132131", "113123", "113321", "133121", "313121",
    "211331", "231131", "213113", "213311", "213131", "311123", "311321",
    "331121", "312113", "312311", "332111", "314111", "221411", "431111",
    "111224", "111422", "121124", "121421", "141122", "141221", "112214",
    "112412", "122114", "122411", "142112", "142211", "241211", "221114",
    "413111", "241112", "134111", "111242", "121142", "121241", "114212",
    "124112", "124211", "411212", "421112", "421211", "212141", "214121",
    "412121", "111143", "111341", "131141", "114113", "114311", "411113",
    "411311", "113141", "114131", "311141", "411131", "211412", "211214",
    "211232", "2331112",
)

_START = {"A": 103, "B": 104, "C": 105}
_SWITCH = {"A": 101, "B": 100, "C": 99}
_STOP = 106


def _digit_run(text: str, start: int) -> int:
    end = start
    while end < len(text) and text[end].isascii() and text[end].isdigit():
        end += 1
    return end - start


def _symbol_values(text: str) -> list[int]:
    if not text:
        raise ValueError("barcode content must not be empty")

    values: list[int] = []
    code_set: str | None = None

    def use(wanted: str) -> None:
        nonlocal code_set
        if code_set is None:
            values.append(_START[wanted])
        elif code_set != wanted:
            values.append(_SWITCH[wanted])
        code_set = wanted

    pos = 0
    while pos < len(text):
        run = _digit_run(text, pos)
        if run >= 4:
            use("C")
            span = run - run % 2
            values.extend(int(text[i:i + 2]) for i in range(pos, pos + span, 2))
            pos += span
            continue

        code = ord(text[pos])
        if code > 127:
            raise ValueError(f"character {text[pos]!r} cannot be encoded in Code 128")
        if code < 32:
            use("A")
            values.append(code + 64)
        elif code_set == "A" and code < 96:
            values.append(code - 32)
        else:
            use("B")
            values.append(code - 32)
        pos += 1

    checksum = (values[0] + sum(weight * value for weight, value in enumerate(values[1:], 1))) % 103
    values.append(checksum)
    values.append(_STOP)
    return values


def encode_code128(text: str) -> list[bool]:
    """Encode *text* as Code 128 and return its modules, True for a bar."""
    modules: list[bool] = []
    for value in _symbol_values(text):
        for position, width in enumerate(_PATTERNS[value]):
            modules.extend([position % 2 == 0] * int(width))
    return modules


def _scale_row(modules: list[bool], width: int) -> bytes:
    if len(modules) > width:
        raise ValueError(
            f"can not scale barcode to an image smaller than {len(modules)}x1"
        )
    module_size = width // len(modules)
    offset = (width - len(modules) * module_size) // 2
    pixels = bytearray(b"\xff" * width)
    for index, dark in enumerate(modules):
        if dark:
            start = offset + index * module_size
            pixels[start:start + module_size] = b"\x00" * module_size
    return bytes(pixels)


def _png_chunk(tag: bytes, body: bytes) -> bytes:
    crc = zlib.crc32(tag + body) & 0xFFFFFFFF
    return struct.pack(">I", len(body)) + tag + body + struct.pack(">I", crc)


def _grayscale_png(row: bytes, height: int) -> bytes:
    header = struct.pack(">IIBBBBB", len(row), height, 8, 0, 0, 0, 0)
    raw = (b"\x00" + row) * height
    return b"".join(
        (
            b"\x89PNG\r\n\x1a\n",
            _png_chunk(b"IHDR", header),
            _png_chunk(b"IDAT", zlib.compress(raw)),
            _png_chunk(b"IEND", b""),
        )
    )


class BarcodeService:
    """Makes barcode strings for new items and renders them as images."""

    def generate_barcode(self, category_id: int, supplier_id: int) -> str:
        """Return a barcode built from the ids, the current time and random text."""
        timestamp = datetime.now().strftime("%y%m%d%H%M%S")
        random_part = base64.b32encode(secrets.token_bytes(6)).decode("ascii")[:8]
        return f"C{category_id:03d}-S{supplier_id:03d}-{timestamp}-{random_part}"

    def generate_barcode_image(self, barcode_text: str) -> bytes:
        """Render *barcode_text* as a 300x100 Code 128 PNG image."""
        row = _scale_row(encode_code128(barcode_text), _IMAGE_WIDTH)
        return _grayscale_png(row, _IMAGE_HEIGHT)
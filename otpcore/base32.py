"""
base32.py — Decode secret Base32 (RFC 4648 §6) cho TOTP / HOTP.

Secret do user gõ tay hoặc quét từ QR thường có "nhiễu":
- chữ thường (Google Authenticator hiển thị chữ thường),
- khoảng trắng chia nhóm 4 ký tự ("JBSW Y3DP EHPK 3PXP"),
- padding '=' ở cuối (hoặc không có).

decode_base32() chấp nhận các dạng trên nhưng từ chối mọi ký tự ngoài
bảng chữ cái Base32.
"""

import logging
import string

import pyotp

from .errors import InvalidSecret

logger = logging.getLogger(__name__)

# RFC 4648 base32 alphabet
BASE32_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
_CHAR_VALUES = {ch: i for i, ch in enumerate(BASE32_ALPHABET)}
# chỉ đổi a-z -> A-Z; str.upper() biến "ß" thành "SS", "ı" thành "I"
_ASCII_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)

SECRET_BYTES = 20  # 160-bit secret (common practice)


def clean_secret(secret: str) -> str:
    """
    Chuẩn hóa secret trước khi decode.

    - Bỏ toàn bộ whitespace (space, tab, newline).
    - Đổi a-z sang chữ hoa (chỉ ASCII; ký tự Unicode giữ nguyên để bị từ chối).
    - Bỏ padding '=' ở CUỐI chuỗi; '=' ở giữa chuỗi vẫn bị coi là ký tự lạ.
    """
    cleaned = "".join(secret.split()).translate(_ASCII_UPPER)
    return cleaned.rstrip("=")


def decode_base32(secret: str) -> bytes:
    """
    Decode Base32 -> raw key bytes.

    Mỗi ký tự là một nhóm 5 bit (index trong BASE32_ALPHABET). Các nhóm được
    ghép MSB-first thành một dòng bit liên tục, cắt thành từng byte 8 bit từ
    đầu. Bit thừa ở cuối (< 8 bit) bị bỏ, không pad.

    => len(result) == floor(5 * số_ký_tự / 8)

    Arguments:
        secret: chuỗi Base32 (không phân biệt hoa/thường)

    Trả về:
        bytes: key. Chuỗi rỗng -> b"" (không lỗi; generator mới là nơi từ chối key rỗng)

    Raises:
        InvalidSecret: gặp ký tự ngoài bảng chữ cái (kèm ký tự vi phạm đầu tiên)
    """
    cleaned = clean_secret(secret)

    buffer = 0  # bit accumulator
    bits = 0    # số bit đang chờ trong buffer
    out = bytearray()
    for ch in cleaned:
        value = _CHAR_VALUES.get(ch)
        if value is None:
            raise InvalidSecret(f"Invalid base32 character: {ch!r}", character=ch)
        buffer = (buffer << 5) | value
        bits += 5
        if bits >= 8:
            bits -= 8
            out.append((buffer >> bits) & 0xFF)
            buffer &= (1 << bits) - 1

    logger.debug("Decoded %d base32 chars into %d key bytes", len(cleaned), len(out))
    return bytes(out)


def generate_base32_secret() -> str:
    """
    Sinh secret ngẫu nhiên 160 bit, mã hóa Base32 (chữ hoa, không padding).

    Dùng để import vào Google Authenticator / Authy hoặc để test.
    """
    return pyotp.random_base32(length=SECRET_BYTES * 8 // 5)

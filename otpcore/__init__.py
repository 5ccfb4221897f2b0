"""
otpcore package
===============

Sinh và xác minh mã OTP (HOTP/TOTP) theo chuẩn RFC 4226 & RFC 6238,
kèm bộ decode secret Base32 (RFC 4648).

──────────────────────────────────────────────
Giải thuật cốt lõi
──────────────────────────────────────────────
- HOTP: code = Truncate(HMAC-<alg>(key=secret, msg=counter)) mod 10^digits
- TOTP: HOTP với counter = floor(timestamp / period), period mặc định 30s.
- Dynamic Truncation: lấy 4 byte từ HMAC tại offset = last byte & 0x0F,
  clear bit cao nhất.

──────────────────────────────────────────────
Hướng dẫn dành cho các nhóm dev
──────────────────────────────────────────────

1. Tầng quản lý secret / account
   - Truyền (secret, algorithm, digits, period) của từng account, nhận lại
     mã + số giây còn lại:
        from otpcore import current_totp
        state = current_totp(secret, "SHA1", 6, 30)
        render(state.code, state.remaining)

2. Xử lý lỗi
   - InvalidSecret / UnsupportedAlgorithm / InvalidParameters đều kế thừa
     OTPError (ValueError). Không có mã "000000" dự phòng: bắt exception và
     đánh dấu account là cấu hình sai.

3. Test
   - Mọi hàm nhận `timestamp=` để cố định thời gian:
        totp(secret, "SHA1", 8, 30, timestamp=59)  # -> "94287082"
"""

from .base32 import decode_base32, generate_base32_secret
from .errors import InvalidParameters, InvalidSecret, OTPError, UnsupportedAlgorithm
from .otp_core import (
    DEFAULT_ALGORITHM,
    DEFAULT_DIGITS,
    DEFAULT_PERIOD,
    Algorithm,
    TOTPState,
    current_totp,
    dynamic_truncate,
    format_otpauth_uri,
    hotp,
    int_to_bytes,
    seconds_remaining,
    totp,
    verify_totp,
)

__all__ = [
    "Algorithm",
    "DEFAULT_ALGORITHM",
    "DEFAULT_DIGITS",
    "DEFAULT_PERIOD",
    "InvalidParameters",
    "InvalidSecret",
    "OTPError",
    "TOTPState",
    "UnsupportedAlgorithm",
    "current_totp",
    "decode_base32",
    "dynamic_truncate",
    "format_otpauth_uri",
    "generate_base32_secret",
    "hotp",
    "int_to_bytes",
    "seconds_remaining",
    "totp",
    "verify_totp",
]

#!/usr/bin/env python3
"""
otp_core.py — Core library cho TOTP (RFC 6238) / HOTP (RFC 4226).

Mục tiêu:
- Chỉ chứa hàm thuần (pure functions): không đọc/ghi file, không network.
- Thứ duy nhất "bên ngoài" là đồng hồ hệ thống, và nó có thể được inject qua
  tham số `timestamp` (dùng cho test với vector RFC 6238).
- Lỗi input luôn raise exception (xem errors.py) — KHÔNG bao giờ trả về mã
  giả kiểu "000000".

Thuật toán hỗ trợ: SHA1 (mặc định), SHA256, SHA512.
"""

import enum
import hashlib
import hmac
import logging
import math
import numbers
import struct
import time
import urllib.parse
from typing import NamedTuple, Optional, Union

from .base32 import clean_secret, decode_base32
from .errors import InvalidParameters, InvalidSecret, UnsupportedAlgorithm

logger = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # chuẩn: 6 chữ số
DEFAULT_PERIOD = 30         # TOTP step (giây)
DEFAULT_ALGORITHM = "SHA1"  # RFC 6238 default
MAX_COUNTER = 2 ** 64 - 1   # counter là unsigned 64-bit


class Algorithm(enum.Enum):
    """Thuật toán HMAC được hỗ trợ (đóng, chỉ 3 giá trị)."""

    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @property
    def digestmod(self):
        """hashlib constructor tương ứng."""
        return _DIGESTMODS[self]

    @classmethod
    def from_name(cls, name: Union[str, "Algorithm", None]) -> "Algorithm":
        """
        Đổi tên thuật toán (không phân biệt hoa/thường, chấp nhận "sha-256")
        sang Algorithm. None -> SHA1.

        Raises:
            UnsupportedAlgorithm: tên không thuộc SHA1/SHA256/SHA512 (vd "MD5")
        """
        if name is None:
            return cls.SHA1
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            raise UnsupportedAlgorithm(name)
        key = name.strip().upper().replace("-", "")
        try:
            return cls(key)
        except ValueError:
            raise UnsupportedAlgorithm(name) from None


_DIGESTMODS = {
    Algorithm.SHA1: hashlib.sha1,
    Algorithm.SHA256: hashlib.sha256,
    Algorithm.SHA512: hashlib.sha512,
}


class TOTPState(NamedTuple):
    """Mã hiện tại + số giây còn hiệu lực, tính trên CÙNG một thời điểm."""

    code: str
    remaining: int
    period: int


# --- Validation helpers ------------------------------------------------------
def _check_digits(digits: int) -> None:
    if not isinstance(digits, int) or isinstance(digits, bool) or digits <= 0:
        raise InvalidParameters(f"digits must be a positive integer, got {digits!r}")


def _check_period(period: int) -> None:
    if not isinstance(period, int) or isinstance(period, bool) or period <= 0:
        raise InvalidParameters(f"period must be a positive integer, got {period!r}")


def _resolve_timestamp(timestamp: Optional[float]) -> int:
    """Đọc đồng hồ MỘT lần nếu caller không truyền timestamp; làm tròn xuống giây."""
    if timestamp is None:
        timestamp = time.time()
    if not isinstance(timestamp, numbers.Real) or isinstance(timestamp, bool):
        raise InvalidParameters(f"timestamp must be a number, got {timestamp!r}")
    if not math.isfinite(timestamp):
        raise InvalidParameters(f"timestamp must be finite, got {timestamp!r}")
    if timestamp < 0:
        raise InvalidParameters(f"timestamp must not be negative, got {timestamp!r}")
    return int(timestamp)


def _decode_key(secret: str) -> bytes:
    key = decode_base32(secret)
    if not key:
        raise InvalidSecret("Secret decodes to an empty key")
    return key


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(counter: int) -> bytes:
    """
    Chuyển counter sang 8-byte big-endian như RFC4226 yêu cầu.

    Ví dụ: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'

    Raises:
        InvalidParameters: counter không phải int, âm hoặc vượt quá 64 bit
    """
    if not isinstance(counter, int) or isinstance(counter, bool):
        raise InvalidParameters(f"counter must be an integer, got {counter!r}")
    if counter < 0 or counter > MAX_COUNTER:
        raise InvalidParameters(f"counter out of unsigned 64-bit range: {counter!r}")
    return struct.pack(">Q", counter)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    Dynamic truncation theo RFC4226 §5.3.

    - offset = last_byte & 0x0F
    - lấy 4 bytes từ offset, đọc big-endian, clear bit cao nhất
    - trả về integer 31-bit (unsigned)

    Với SHA1 (20 bytes) offset tối đa 15 -> đọc tới byte 18, luôn hợp lệ.
    """
    offset = hmac_digest[-1] & 0x0F
    (value,) = struct.unpack(">I", hmac_digest[offset:offset + 4])
    return value & 0x7FFFFFFF


def _hotp_from_key(key: bytes, counter: int, digits: int, algo: Algorithm) -> str:
    msg = int_to_bytes(counter)
    digest = hmac.new(key, msg, algo.digestmod).digest()
    dbc = dynamic_truncate(digest)
    code = str(dbc % (10 ** digits)).zfill(digits)
    logger.debug("HOTP: HMAC-%s(counter=%d) dbc=%d digits=%d", algo.value, counter, dbc, digits)
    return code


def hotp(
    secret_b32: str,
    counter: int,
    digits: int = DEFAULT_DIGITS,
    algorithm: Union[str, Algorithm] = DEFAULT_ALGORITHM,
) -> str:
    """
    Sinh mã HOTP theo RFC4226.

    Steps:
    1. Base32-decode secret -> raw key bytes
    2. Message = 8-byte counter (big-endian)
    3. HMAC-<algorithm>(key, message)
    4. Dynamic truncate -> dbc
    5. otp = dbc % 10^digits
    6. Zero-pad để có đúng "digits" chữ số

    Raises:
        InvalidParameters: digits <= 0, counter ngoài [0, 2^64)
        UnsupportedAlgorithm: thuật toán lạ
        InvalidSecret: secret Base32 sai hoặc rỗng
    """
    _check_digits(digits)
    algo = Algorithm.from_name(algorithm)
    key = _decode_key(secret_b32)
    return _hotp_from_key(key, counter, digits, algo)


def totp(
    secret_b32: str,
    algorithm: Union[str, Algorithm] = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_PERIOD,
    timestamp: Optional[float] = None,
) -> str:
    """
    Sinh mã TOTP theo RFC6238: HOTP với counter = floor(timestamp / period).

    Arguments:
        secret_b32: Base32 secret
        algorithm: "SHA1" | "SHA256" | "SHA512" (không phân biệt hoa/thường)
        digits: số chữ số OTP (thường 6 hoặc 8)
        period: X (giây), mặc định 30
        timestamp: epoch seconds (None -> đọc time.time() một lần)

    Trả về:
        str: mã TOTP dài đúng `digits` ký tự, zero-padded
    """
    _check_digits(digits)
    _check_period(period)
    algo = Algorithm.from_name(algorithm)
    key = _decode_key(secret_b32)
    now = _resolve_timestamp(timestamp)
    counter = now // period
    logger.debug("TOTP: time=%d, period=%d, counter=%d", now, period, counter)
    return _hotp_from_key(key, counter, digits, algo)


def seconds_remaining(period: int = DEFAULT_PERIOD, timestamp: Optional[float] = None) -> int:
    """
    Số giây còn lại trước khi counter nhảy sang chu kỳ mới.

    Luôn nằm trong (0, period]: đúng tại ranh giới (vd t=30, period=30) trả về
    `period` chứ không phải 0, vì counter vừa nhảy còn nguyên một chu kỳ.
    """
    _check_period(period)
    now = _resolve_timestamp(timestamp)
    return period - (now % period)


def current_totp(
    secret_b32: str,
    algorithm: Union[str, Algorithm] = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_PERIOD,
    timestamp: Optional[float] = None,
) -> TOTPState:
    """
    Trả về (code, remaining, period) — tiện cho UI countdown.

    Đồng hồ chỉ được đọc một lần, nên code và remaining luôn khớp nhau kể cả
    khi gọi sát ranh giới chu kỳ.
    """
    now = _resolve_timestamp(timestamp)
    code = totp(secret_b32, algorithm=algorithm, digits=digits, period=period, timestamp=now)
    return TOTPState(code, seconds_remaining(period, now), period)


def verify_totp(
    secret_b32: str,
    code: str,
    algorithm: Union[str, Algorithm] = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_PERIOD,
    window: int = 1,
    timestamp: Optional[float] = None,
) -> bool:
    """
    Xác minh mã TOTP do user nhập (theo RFC6238), cho phép lệch +/- `window` chu kỳ.

    - So sánh bằng hmac.compare_digest (constant-time).
    - Counter âm (gần epoch) được bỏ qua.
    - Không lưu mã đã dùng: chống replay là việc của tầng lưu trữ.

    Raises:
        InvalidParameters: window âm, digits/period không hợp lệ
        UnsupportedAlgorithm, InvalidSecret: như totp()
    """
    _check_digits(digits)
    _check_period(period)
    if not isinstance(window, int) or isinstance(window, bool) or window < 0:
        raise InvalidParameters(f"window must be a non-negative integer, got {window!r}")
    algo = Algorithm.from_name(algorithm)
    key = _decode_key(secret_b32)
    now = _resolve_timestamp(timestamp)

    candidate = "".join(str(code).split())
    counter = now // period
    for offset in range(-window, window + 1):
        test_counter = counter + offset
        if test_counter < 0 or test_counter > MAX_COUNTER:
            continue
        expected = _hotp_from_key(key, test_counter, digits, algo)
        if hmac.compare_digest(expected.encode("ascii"), candidate.encode("utf-8")):
            logger.debug("TOTP verified at counter offset %+d", offset)
            return True
    return False


def format_otpauth_uri(
    secret_b32: str,
    account: str,
    issuer: str,
    algorithm: Union[str, Algorithm] = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_PERIOD,
) -> str:
    """
    Tạo otpauth:// URI cho TOTP — dễ import vào ứng dụng Authenticator.

    otpauth://totp/{issuer}:{account}?secret=...&issuer=...&algorithm=...&digits=...&period=...

    Secret được chuẩn hóa (chữ hoa, bỏ khoảng trắng/padding) và kiểm tra trước,
    label và query được URL-encode.
    """
    _check_digits(digits)
    _check_period(period)
    algo = Algorithm.from_name(algorithm)
    _decode_key(secret_b32)

    params = {"secret": clean_secret(secret_b32)}
    if issuer:
        label = f"{issuer}:{account}"
        params["issuer"] = issuer
    else:
        label = account
    params.update(algorithm=algo.value, digits=digits, period=period)
    path = urllib.parse.quote(label, safe=":@")
    return f"otpauth://totp/{path}?{urllib.parse.urlencode(params)}"

"""
errors.py — Các exception của otpcore.

Tất cả lỗi đều xuất phát từ input (secret sai, thuật toán lạ, tham số âm...),
nên gọi lại với cùng input sẽ ra cùng lỗi — caller tự quyết định xử lý
(đánh dấu account lỗi, báo user nhập lại secret, ...).
"""


class OTPError(ValueError):
    """Base class — bắt một lần cho mọi lỗi OTP."""


class InvalidSecret(OTPError):
    """Secret Base32 không hợp lệ (ký tự lạ) hoặc key sau decode rỗng."""

    def __init__(self, message: str, character: str = None):
        super().__init__(message)
        self.character = character


class UnsupportedAlgorithm(OTPError):
    """Tên thuật toán không thuộc SHA1 / SHA256 / SHA512."""

    def __init__(self, name):
        super().__init__(f"Unsupported algorithm: {name!r} (expected SHA1, SHA256 or SHA512)")
        self.name = name


class InvalidParameters(OTPError):
    """digits / period / timestamp / counter nằm ngoài miền hợp lệ."""

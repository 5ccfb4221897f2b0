#!/usr/bin/env python3
"""
otp_cli.py — CLI wrapper cho otp_core.py

Không lưu gì xuống đĩa: secret lấy từ --secret hoặc biến môi trường OTP_SECRET.

Cung cấp các subcommand:
- init   : tạo secret mới, in ra otpauth URI
- code   : in mã TOTP hiện tại + số giây còn lại
- hotp   : sinh mã HOTP cho một counter
- watch  : hiển thị mã TOTP real-time (Ctrl+C để thoát)
- uri    : in ra otpauth URI
- verify : xác minh mã TOTP (exit 0 nếu đúng, 1 nếu sai)

Usage examples:
  python -m otpcore.otp_cli init --account alice@example --issuer MyService
  OTP_SECRET=JBSWY3DPEHPK3PXP python -m otpcore.otp_cli code --digits 8
  python -m otpcore.otp_cli hotp --secret JBSWY3DPEHPK3PXP --counter 42 --verbose
  python -m otpcore.otp_cli verify --secret JBSWY3DPEHPK3PXP --code 123456 --window 1
"""

import argparse
import logging
import os
import sys
import time

from . import otp_core
from .base32 import generate_base32_secret
from .errors import InvalidSecret, OTPError

logger = logging.getLogger(__name__)

SECRET_ENV = "OTP_SECRET"


def _secret(args) -> str:
    secret = args.secret or os.getenv(SECRET_ENV)
    if not secret:
        raise InvalidSecret(f"No secret given. Pass --secret or set {SECRET_ENV}.")
    return secret


# --- CLI command handlers ---
def cmd_help(args):
    print("'python -m otpcore.otp_cli -h' for help.")
    return 0


def cmd_init(args):
    secret = generate_base32_secret()
    logger.debug("Generated %d-char base32 secret", len(secret))
    uri = otp_core.format_otpauth_uri(
        secret, account=args.account, issuer=args.issuer,
        algorithm=args.algorithm, digits=args.digits, period=args.period,
    )
    print("Secret:", secret)
    print("[*] otpauth URI (import into authenticator apps):")
    print("    TOTP:", uri)
    return 0


def cmd_code(args):
    state = otp_core.current_totp(
        _secret(args), algorithm=args.algorithm, digits=args.digits,
        period=args.period, timestamp=args.time,
    )
    print(f"TOTP: {state.code}  (valid ~{state.remaining:2d}s)")
    return 0


def cmd_hotp(args):
    code = otp_core.hotp(_secret(args), args.counter, digits=args.digits, algorithm=args.algorithm)
    print(f"HOTP(counter={args.counter}): {code}")
    return 0


def cmd_watch(args):
    secret = _secret(args)
    print("Press Ctrl+C to quit. Generating TOTP in real time...\n")
    last_code = None
    try:
        while True:
            state = otp_core.current_totp(
                secret, algorithm=args.algorithm, digits=args.digits, period=args.period,
            )
            if state.code != last_code:
                print(f"TOTP ({args.digits}d): {state.code}  (valid ~{state.remaining:2d}s)")
                last_code = state.code
            else:
                # Update remaining seconds inline
                print(f".. {state.remaining:2d}s left", end="\r", flush=True)
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nBye.")
    return 0


def cmd_uri(args):
    uri = otp_core.format_otpauth_uri(
        _secret(args), args.account, args.issuer,
        algorithm=args.algorithm, digits=args.digits, period=args.period,
    )
    print(uri)
    return 0


def cmd_verify(args):
    ok = otp_core.verify_totp(
        _secret(args), args.code, algorithm=args.algorithm, digits=args.digits,
        period=args.period, window=args.window, timestamp=args.time,
    )
    if ok:
        print("[+] TOTP code is VALID")
        return 0
    print("[-] TOTP code is INVALID")
    return 1


# --- Argparse builder ---
def _add_otp_options(p, secret=True, period=True):
    if secret:
        p.add_argument("--secret", help=f"Base32 secret (default: ${SECRET_ENV})")
    p.add_argument("--algorithm", default=otp_core.DEFAULT_ALGORITHM,
                   help="HMAC algorithm: SHA1, SHA256 or SHA512")
    p.add_argument("--digits", type=int, default=otp_core.DEFAULT_DIGITS, help="Number of OTP digits")
    if period:
        p.add_argument("--period", type=int, default=otp_core.DEFAULT_PERIOD,
                       help="TOTP time step (seconds)")
    p.add_argument("--verbose", action="store_true", help="Verbose output")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="TOTP/HOTP (RFC 6238 / RFC 4226) generator CLI")
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help, verbose=False)

    # init
    pi = sub.add_parser("init", help="Generate a new secret and print its otpauth URI")
    pi.add_argument("--account", default="user@example", help="Account label for otpauth URI")
    pi.add_argument("--issuer", default="otp-tool", help="Issuer label for otpauth URI")
    _add_otp_options(pi, secret=False)
    pi.set_defaults(func=cmd_init)

    # code
    pc = sub.add_parser("code", help="Print the current TOTP code")
    _add_otp_options(pc)
    pc.add_argument("--time", type=int, help="Unix time to generate for (default: now)")
    pc.set_defaults(func=cmd_code)

    # hotp
    ph = sub.add_parser("hotp", help="Generate HOTP code for a specific counter")
    ph.add_argument("--counter", type=int, required=True)
    _add_otp_options(ph, period=False)
    ph.set_defaults(func=cmd_hotp)

    # watch
    pw = sub.add_parser("watch", help="Show TOTP code in real time")
    _add_otp_options(pw)
    pw.set_defaults(func=cmd_watch)

    # uri
    pu = sub.add_parser("uri", help="Print the otpauth URI")
    pu.add_argument("--account", default="user@example")
    pu.add_argument("--issuer", default="otp-tool")
    _add_otp_options(pu)
    pu.set_defaults(func=cmd_uri)

    # verify
    pv = sub.add_parser("verify", help="Verify a TOTP code")
    pv.add_argument("--code", required=True, help="OTP code to verify")
    pv.add_argument("--window", type=int, default=1, help="Allowed +/- step window")
    pv.add_argument("--time", type=int, help="Unix time to verify at (default: now)")
    _add_otp_options(pv)
    pv.set_defaults(func=cmd_verify)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="[+] %(message)s")
    try:
        return args.func(args)
    except OTPError as e:
        print(f"[!] {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

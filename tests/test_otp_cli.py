"""Tests for the otp_cli command line wrapper."""

import base64
import re

import pytest

from otpcore.otp_cli import build_parser, main

SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


class TestOtpCli:
    """Tests for otp_cli subcommands."""

    def test_no_command(self, capsys):
        """Running without a subcommand prints a hint."""
        assert main([]) == 0
        assert "-h" in capsys.readouterr().out

    def test_code(self, capsys):
        """code prints the TOTP for the given time and the countdown."""
        assert main(["code", "--secret", SECRET, "--digits", "8", "--time", "59"]) == 0
        out = capsys.readouterr().out
        assert "94287082" in out
        assert "valid ~ 1s" in out

    def test_code_from_env(self, capsys, monkeypatch):
        """The secret falls back to OTP_SECRET."""
        monkeypatch.setenv("OTP_SECRET", SECRET)
        assert main(["code", "--time", "59"]) == 0
        assert "287082" in capsys.readouterr().out

    def test_code_sha512(self, capsys):
        """--algorithm selects the HMAC hash."""
        secret = base64.b32encode(b"1234567890" * 6 + b"1234").decode("ascii")
        assert main(["code", "--secret", secret, "--algorithm", "sha512",
                     "--digits", "8", "--time", "59"]) == 0
        assert "90693936" in capsys.readouterr().out

    def test_hotp(self, capsys):
        """hotp prints the code for a counter."""
        assert main(["hotp", "--secret", SECRET, "--counter", "0"]) == 0
        assert "HOTP(counter=0): 755224" in capsys.readouterr().out

    def test_uri(self, capsys):
        """uri prints an otpauth URI."""
        assert main(["uri", "--secret", SECRET, "--account", "alice", "--issuer", "MyApp"]) == 0
        out = capsys.readouterr().out.strip()
        assert out.startswith("otpauth://totp/MyApp:alice?")
        assert f"secret={SECRET}" in out

    def test_init(self, capsys):
        """init generates a fresh secret and its URI."""
        assert main(["init", "--account", "bob", "--issuer", "Demo"]) == 0
        out = capsys.readouterr().out
        match = re.search(r"Secret: ([A-Z2-7]{32})", out)
        assert match
        assert f"secret={match.group(1)}" in out

    def test_verify_valid(self, capsys):
        """verify exits 0 for a valid code."""
        assert main(["verify", "--secret", SECRET, "--code", "287082", "--time", "59"]) == 0
        assert "VALID" in capsys.readouterr().out

    def test_verify_invalid(self, capsys):
        """verify exits 1 for a code outside the window."""
        argv = ["verify", "--secret", SECRET, "--code", "287082", "--time", "89", "--window", "0"]
        assert main(argv) == 1
        assert "INVALID" in capsys.readouterr().out

    def test_invalid_secret(self, capsys):
        """OTP errors are reported on stderr with exit status 2."""
        assert main(["code", "--secret", "12345!!!"]) == 2
        assert "[!] Invalid base32 character: '1'" in capsys.readouterr().err

    def test_unsupported_algorithm(self, capsys):
        """Unknown algorithms are reported, not replaced with a code."""
        assert main(["code", "--secret", SECRET, "--algorithm", "MD5"]) == 2
        captured = capsys.readouterr()
        assert "MD5" in captured.err
        assert captured.out == ""

    def test_invalid_digits(self, capsys):
        """Non-positive digits are reported."""
        assert main(["hotp", "--secret", SECRET, "--counter", "1", "--digits", "0"]) == 2
        assert "digits" in capsys.readouterr().err

    def test_missing_secret(self, capsys, monkeypatch):
        """Without --secret or OTP_SECRET the command fails."""
        monkeypatch.delenv("OTP_SECRET", raising=False)
        assert main(["code"]) == 2
        assert "OTP_SECRET" in capsys.readouterr().err

    def test_hotp_requires_counter(self):
        """argparse rejects hotp without --counter."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["hotp", "--secret", SECRET])

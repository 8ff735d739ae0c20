"""
Tests for trigger_trader/bitbank_api/auth.py

Covers HMAC-SHA256 signing, canonical message construction and
the auth header set attached to every private request.
"""

import hashlib
import hmac as hmac_mod
import re
from unittest.mock import patch

import pytest

from trigger_trader.bitbank_api.auth import (
    build_auth_headers,
    build_get_message,
    build_post_message,
    generate_signature,
    sign_get,
    sign_post,
)
from trigger_trader.models import Credentials

REFERENCE_SIGNATURE = "9ec5745960d05573c8fb047cdd9191bd0c6ede26f07700bb40ecf1a3920abae8"


# ---------------------------------------------------------------------------
# generate_signature
# ---------------------------------------------------------------------------


class TestGenerateSignature:
    """Tests for generate_signature()"""

    def test_reproduces_reference_vector(self):
        """Regression: known secret/message pair yields the known digest."""
        assert generate_signature("hoge", "17211217764901000/v1/user/assets") == REFERENCE_SIGNATURE

    def test_matches_stdlib_hmac(self):
        """Happy path: signature equals HMAC-SHA256 hexdigest over UTF-8 bytes."""
        expected = hmac_mod.new(b"secret", b"message", hashlib.sha256).hexdigest()
        assert generate_signature("secret", "message") == expected

    def test_is_lowercase_hex_of_fixed_length(self):
        """Signature is always 64 lowercase hex characters."""
        sig = generate_signature("s", '{"pair":"btc_jpy"}')
        assert re.fullmatch(r"[0-9a-f]{64}", sig)

    def test_deterministic(self):
        """Equal inputs always produce identical signatures."""
        assert generate_signature("k", "m") == generate_signature("k", "m")

    def test_different_secrets_produce_different_signatures(self):
        """Edge case: different secrets produce different results."""
        assert generate_signature("secret-a", "m") != generate_signature("secret-b", "m")

    def test_non_ascii_message_is_utf8_encoded(self):
        """Edge case: non-ASCII text is signed as UTF-8."""
        expected = hmac_mod.new(b"k", "注文".encode("utf-8"), hashlib.sha256).hexdigest()
        assert generate_signature("k", "注文") == expected


# ---------------------------------------------------------------------------
# Message builders
# ---------------------------------------------------------------------------


class TestCanonicalMessages:
    """Tests for build_get_message() / build_post_message()"""

    def test_get_message_includes_version_prefix(self):
        """GET: time + window + /v1 + path."""
        assert build_get_message(1721121776490, 1000, "/user/assets") == "17211217764901000/v1/user/assets"

    def test_get_message_keeps_query_string(self):
        """GET: the query string is part of the signed path."""
        msg = build_get_message(1, 5000, "/user/spot/order?pair=btc_jpy&order_id=7")
        assert msg == "15000/v1/user/spot/order?pair=btc_jpy&order_id=7"

    def test_post_message_uses_body_verbatim(self):
        """POST: time + window + body, no path."""
        body = '{"pair":"btc_jpy","amount":"0.010000","side":"buy","type":"market"}'
        assert build_post_message(10, 5000, body) == "105000" + body


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------


class TestAuthHeaders:
    """Tests for build_auth_headers(), sign_get() and sign_post()"""

    def test_header_names_and_values(self, credentials):
        """All four ACCESS-* headers are present with decimal strings."""
        headers = build_auth_headers(credentials, "ABCDEF", 1721121776490)
        assert headers == {
            "ACCESS-KEY": "test-key",
            "ACCESS-SIGNATURE": "abcdef",
            "ACCESS-REQUEST-TIME": "1721121776490",
            "ACCESS-TIME-WINDOW": "1000",
        }

    @patch("trigger_trader.bitbank_api.auth.time.time", return_value=1721121776.4905)
    def test_sign_get_reproduces_reference_vector(self, mock_time, credentials):
        """GET /user/assets at the reference time signs to the reference digest."""
        headers = sign_get(credentials, "/user/assets")
        assert headers["ACCESS-REQUEST-TIME"] == "1721121776490"
        assert headers["ACCESS-SIGNATURE"] == REFERENCE_SIGNATURE

    @patch("trigger_trader.bitbank_api.auth.time.time", return_value=1700000000.0)
    def test_sign_post_signs_body(self, mock_time, credentials):
        """POST signature covers the exact body string."""
        body = '{"pair":"btc_jpy"}'
        headers = sign_post(credentials, body)
        assert headers["ACCESS-SIGNATURE"] == generate_signature("hoge", "17000000000001000" + body)

    def test_request_time_is_fresh_per_call(self, credentials):
        """Each call reads the clock again."""
        with patch("trigger_trader.bitbank_api.auth.time.time", side_effect=[1.0, 2.0]):
            first = sign_get(credentials, "/user/assets")
            second = sign_get(credentials, "/user/assets")
        assert first["ACCESS-REQUEST-TIME"] == "1000"
        assert second["ACCESS-REQUEST-TIME"] == "2000"
        assert first["ACCESS-SIGNATURE"] != second["ACCESS-SIGNATURE"]


class TestCredentials:
    """Tests for the Credentials value type"""

    def test_rejects_non_positive_window(self):
        with pytest.raises(ValueError):
            Credentials(access_key="k", secret_key="s", time_window_ms=0)

    def test_secret_not_in_repr(self):
        """The secret key never shows up in logs via repr()."""
        creds = Credentials(access_key="k", secret_key="super-secret", time_window_ms=5000)
        assert "super-secret" not in repr(creds)

"""
Tests for service helpers that do not need the HTTP layer
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from jose import JWTError, jwt

from digiread.config import Settings, get_settings
from digiread.services.mail import MailtrapMailSender
from digiread.services.security import (
    ALGORITHM,
    create_session_token,
    decode_session_token,
    generate_verification_token,
    hash_token,
    token_matches,
)
from digiread.services.session import cookie_attributes
from digiread.services.storage import S3ObjectStore
from digiread.utils import format_file_size, format_price, slugify


def make_settings(**overrides) -> Settings:
    return get_settings().model_copy(update=overrides)


class TestSecurity:

    def test_verification_token_shape(self):
        token = generate_verification_token()

        assert len(token) == 72
        assert token != generate_verification_token()

    def test_token_matches_digest(self):
        token = generate_verification_token()
        digest = hash_token(token)

        assert len(digest) == 64
        assert digest != token
        assert token_matches(token, digest)
        assert not token_matches(token + "0", digest)

    def test_session_round_trip(self):
        assert decode_session_token(create_session_token(42)) == 42

    def test_expired_session(self):
        token = create_session_token(42, expires_delta=timedelta(seconds=-1))

        with pytest.raises(JWTError):
            decode_session_token(token)

    def test_wrong_token_type(self):
        token = jwt.encode(
            {"sub": "42", "type": "refresh"},
            get_settings().secret_key,
            algorithm=ALGORITHM,
        )

        with pytest.raises(JWTError):
            decode_session_token(token)

    def test_foreign_signature(self):
        token = jwt.encode(
            {"sub": "42", "type": "session"},
            "another-secret-key-that-is-long-enough-for-hs256",
            algorithm=ALGORITHM,
        )

        with pytest.raises(JWTError):
            decode_session_token(token)


class TestSessionCookie:

    def test_development_attributes(self):
        attrs = cookie_attributes(make_settings(environment="development"))

        assert attrs["httponly"] is True
        assert attrs["secure"] is False
        assert attrs["samesite"] == "strict"
        assert attrs["path"] == "/"

    def test_production_attributes(self):
        attrs = cookie_attributes(make_settings(environment="production"))

        assert attrs["secure"] is True
        assert attrs["samesite"] == "none"


class TestMailtrapRequest:

    def test_sandbox_request(self):
        sender = MailtrapMailSender(
            make_settings(environment="development", mailtrap_inbox_id="123", mailtrap_test_token="sandbox")
        )

        url, token, body = sender.build_request("a@example.com", "http://x.test/verify?token=t", "Ann")

        assert url.endswith("/123")
        assert "sandbox" in url
        assert token == "sandbox"
        assert body["to"] == [{"email": "a@example.com"}]
        assert body["subject"] == "Auth Verification"
        assert "http://x.test/verify?token=t" in body["html"]
        assert "Hello Ann" in body["html"]

    def test_production_request_uses_template(self):
        sender = MailtrapMailSender(
            make_settings(environment="production", mailtrap_token="live", mailtrap_template_uuid="tpl-1")
        )

        url, token, body = sender.build_request("a@example.com", "https://x.test/v", "Ann")

        assert url == "https://send.api.mailtrap.io/api/send"
        assert token == "live"
        assert body["template_uuid"] == "tpl-1"
        assert body["template_variables"] == {
            "user_name": "Ann",
            "next_step_link": "https://x.test/v",
        }

    def test_name_is_escaped(self):
        sender = MailtrapMailSender(make_settings(environment="development"))

        _, _, body = sender.build_request("a@example.com", "http://x.test", "<b>Ann</b>")

        assert "<b>Ann</b>" not in body["html"]


class TestS3ObjectStore:

    def test_public_url_on_aws(self):
        store = S3ObjectStore(make_settings(aws_endpoint_url=None, aws_region="eu-west-1"))

        assert store.public_url("covers", "1-a.png") == "https://covers.s3.eu-west-1.amazonaws.com/1-a.png"

    def test_public_url_on_custom_endpoint(self):
        store = S3ObjectStore(make_settings(aws_endpoint_url="http://minio.local:9000/"))

        assert store.public_url("covers", "1-a.png") == "http://minio.local:9000/covers/1-a.png"

    def test_put_and_signed_url(self):
        store = S3ObjectStore(make_settings(aws_endpoint_url=None, aws_region="us-east-1"))
        store.client = MagicMock()
        store.client.generate_presigned_url.return_value = "https://signed.example/put"

        url = store.put("pub", "k.png", b"data", "image/png")
        signed = store.signed_upload_url("priv", "k.epub", "application/epub+zip")

        store.client.put_object.assert_called_once_with(
            Bucket="pub", Key="k.png", Body=b"data", ContentType="image/png"
        )
        assert url == "https://pub.s3.us-east-1.amazonaws.com/k.png"
        assert signed == "https://signed.example/put"
        assert store.client.generate_presigned_url.call_args.args == ("put_object",)


class TestUtils:

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("The Hobbit 42", "the-hobbit-42"),
            ("  Émile   Zola!  7", "emile-zola-7"),
            ("Already-slugged", "already-slugged"),
        ],
    )
    def test_slugify(self, value, expected):
        assert slugify(value) == expected

    def test_slugify_fallback(self):
        assert slugify("李小龙") == ""
        assert slugify("李小龙", fallback="user") == "user"
        assert slugify("Bruce Lee", fallback="user") == "bruce-lee"

    def test_format_file_size(self):
        assert format_file_size(512) == "512B"
        assert format_file_size(1536) == "1.50KB"
        assert format_file_size(3 * 1024 * 1024) == "3.00MB"

    def test_format_price(self):
        assert format_price(1250) == "12.50"
        assert format_price(0) == "0.00"
        assert format_price(5) == "0.05"


class TestSettings:

    def test_default_database_url_names_installed_driver(self):
        default = Settings.model_fields["database_url"].default

        assert default.startswith("postgresql+psycopg2://")

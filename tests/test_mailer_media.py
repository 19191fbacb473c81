"""Tests for the SMTP mailer, the Cloudinary uploader and email templates."""
import smtplib
from unittest.mock import Mock, patch

import pytest
from cloudinary.exceptions import Error as CloudinaryError

from edusphere.infrastructure.mailer import SmtpMailer
from edusphere.infrastructure.media import CloudinaryUploader, UploadError
from edusphere.services.templates import otp_email, provisioned_account_email


def configured_mailer(**overrides):
    options = dict(
        host="smtp.example.com",
        port=587,
        username="mailer@example.com",
        password="secret",
        from_email="noreply@example.com",
    )
    options.update(overrides)
    return SmtpMailer(**options)


class TestSmtpMailer:
    def test_unconfigured_mailer_only_logs(self):
        with patch("edusphere.infrastructure.mailer.smtplib.SMTP") as smtp:
            assert SmtpMailer().send("a@b.com", "Hi", "<p>hi</p>") is True

        smtp.assert_not_called()

    def test_send_with_starttls(self):
        with patch("edusphere.infrastructure.mailer.smtplib.SMTP") as smtp:
            server = smtp.return_value.__enter__.return_value

            assert configured_mailer().send("a@b.com", "Hi", "<p>hi</p>") is True

        smtp.assert_called_once_with("smtp.example.com", 587, timeout=10)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer@example.com", "secret")
        message = server.send_message.call_args[0][0]
        assert message["To"] == "a@b.com"
        assert message["From"] == "EduSphere <noreply@example.com>"

    def test_send_with_implicit_tls(self):
        with patch("edusphere.infrastructure.mailer.smtplib.SMTP_SSL") as smtp_ssl:
            server = smtp_ssl.return_value.__enter__.return_value

            assert configured_mailer(port=465, use_tls=False).send("a@b.com", "Hi", "x") is True

        server.send_message.assert_called_once()

    @pytest.mark.parametrize("error", [
        smtplib.SMTPAuthenticationError(535, b"bad credentials"),
        ConnectionRefusedError("refused"),
    ])
    def test_failure_is_reported_not_raised(self, error):
        with patch("edusphere.infrastructure.mailer.smtplib.SMTP", side_effect=error):
            assert configured_mailer().send("a@b.com", "Hi", "x") is False


class TestCloudinaryUploader:
    @pytest.fixture
    def sdk(self):
        with patch("edusphere.infrastructure.media.cloudinary.config") as config, \
                patch("edusphere.infrastructure.media.cloudinary.uploader.upload") as upload:
            yield Mock(config=config, upload=upload)

    def test_configures_sdk_from_credentials(self, sdk):
        CloudinaryUploader("demo", "key", "shh")

        sdk.config.assert_called_once_with(
            cloud_name="demo", api_key="key", api_secret="shh", secure=True
        )

    def test_upload_uses_folder_and_auto_resource_type(self, sdk):
        sdk.upload.return_value = {"secure_url": "https://cdn/x.png"}

        result = CloudinaryUploader("demo", "key", "shh", timeout=12).upload(b"data", "x.png", "EduSphere")

        assert result["secure_url"] == "https://cdn/x.png"
        stream = sdk.upload.call_args[0][0]
        kwargs = sdk.upload.call_args[1]
        assert stream.read() == b"data"
        assert kwargs["folder"] == "EduSphere"
        assert kwargs["resource_type"] == "auto"
        assert kwargs["filename"] == "x.png"
        assert kwargs["timeout"] == 12

    def test_sdk_error_becomes_upload_error(self, sdk):
        sdk.upload.side_effect = CloudinaryError("Invalid Signature")

        with pytest.raises(UploadError):
            CloudinaryUploader("demo", "key", "shh").upload(b"data", "x.png", "EduSphere")

    def test_unconfigured(self, sdk):
        with pytest.raises(UploadError):
            CloudinaryUploader(None, None, None).upload(b"data", "x.png", "EduSphere")

        sdk.config.assert_not_called()
        sdk.upload.assert_not_called()


class TestTemplates:
    def test_otp_email_contains_code(self):
        subject, html = otp_email("Ada", "Lovelace", "004219", 300)

        assert subject == "EduSphere - Email Verification"
        assert "004219" in html
        assert "5 minutes" in html

    def test_names_are_escaped(self):
        _, html = provisioned_account_email("<b>Ada</b>", "L", "p@ss&1", "http://localhost:3000/login")

        assert "<b>Ada</b>" not in html
        assert "&lt;b&gt;Ada&lt;/b&gt;" in html
        assert "p@ss&amp;1" in html

import smtplib
from unittest import mock

import pytest

from agriloop import mailer
from agriloop.errors import MailDeliveryError


def test_smtp_mailer_sends_html():
    with mock.patch("smtplib.SMTP") as smtp_cls:
        smtp = smtp_cls.return_value.__enter__.return_value
        m = mailer.SmtpMailer("smtp.example.com", 587, "agri@example.com", "pw")
        m.send("to@example.com", "Hello", "<b>hi</b>")

    smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=30)
    smtp.starttls.assert_called_once()
    smtp.login.assert_called_once_with("agri@example.com", "pw")
    sent = smtp.send_message.call_args[0][0]
    assert sent["To"] == "to@example.com"
    assert sent["From"] == "agri@example.com"


def test_smtp_failure_is_a_delivery_error():
    with mock.patch("smtplib.SMTP", side_effect=smtplib.SMTPConnectError(421, "busy")):
        m = mailer.SmtpMailer("smtp.example.com", 587, None, None, sender="noreply@example.com")
        with pytest.raises(MailDeliveryError):
            m.send("to@example.com", "Hello", "<b>hi</b>")


def test_verification_email_escapes_name():
    html = mailer.verification_email("<script>", "http://x/api/verify-email?token=abc")
    assert "<script>" not in html
    assert "token=abc" in html


def test_mailer_from_config_without_smtp_logs(monkeypatch):
    monkeypatch.setattr(mailer.config, "SMTP_HOST", None)
    assert isinstance(mailer.mailer_from_config(), mailer.LogMailer)

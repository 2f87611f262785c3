import smtplib

import pytest

from essence.core import email_client
from essence.core.config import get_settings


class FakeSMTP:
    """Records the calls send_email makes on an SMTP connection."""

    connections: list = []

    def __init__(self, host, port, timeout=None):
        self.kind = "plain"
        self.address = (host, port)
        self.calls = []
        self.messages = []
        FakeSMTP.connections.append(self)

    def starttls(self):
        self.calls.append("starttls")

    def login(self, username, password):
        self.calls.append(("login", username, password))

    def send_message(self, msg):
        self.messages.append(msg)

    def quit(self):
        self.calls.append("quit")


class FakeSMTPSSL(FakeSMTP):
    def __init__(self, host, port, timeout=None):
        super().__init__(host, port, timeout)
        self.kind = "ssl"


@pytest.fixture
def smtp(monkeypatch):
    FakeSMTP.connections = []
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    monkeypatch.setattr(smtplib, "SMTP_SSL", FakeSMTPSSL)
    return FakeSMTP.connections


def use_settings(monkeypatch, **overrides):
    values = {
        "SMTP_HOST": "smtp.essence-shop.com",
        "SMTP_USERNAME": "orders@essence-shop.com",
        "SMTP_PASSWORD": "app-password",
        **overrides,
    }
    settings = get_settings().model_copy(update=values)
    monkeypatch.setattr(email_client, "get_settings", lambda: settings)
    return settings


def test_not_configured_without_credentials(monkeypatch, smtp):
    use_settings(monkeypatch, SMTP_PASSWORD=None)

    assert email_client.is_configured() is False
    with pytest.raises(RuntimeError):
        email_client.send_email("alice@essence-shop.com", "Hi", "body")
    assert smtp == []


def test_starttls_connection(monkeypatch, smtp):
    use_settings(monkeypatch, SMTP_PORT=587, SMTP_FROM_EMAIL="hello@essence-shop.com")

    email_client.send_email(
        "alice@essence-shop.com",
        "[Essence] Order #3f2b8c1a confirmed",
        "Thanks for your order",
        html_body="<p>Thanks for your order</p>",
    )

    [conn] = smtp
    assert conn.kind == "plain"
    assert conn.address == ("smtp.essence-shop.com", 587)
    assert conn.calls == [
        "starttls",
        ("login", "orders@essence-shop.com", "app-password"),
        "quit",
    ]

    [msg] = conn.messages
    assert msg["From"] == "Essence Boutique <hello@essence-shop.com>"
    assert msg["To"] == "alice@essence-shop.com"
    assert msg["Subject"] == "[Essence] Order #3f2b8c1a confirmed"
    assert msg.is_multipart()


def test_ssl_connection_skips_starttls(monkeypatch, smtp):
    use_settings(monkeypatch, SMTP_PORT=465, SMTP_USE_SSL=True)

    email_client.send_email("alice@essence-shop.com", "Hi", "Plain body")

    [conn] = smtp
    assert conn.kind == "ssl"
    assert conn.address == ("smtp.essence-shop.com", 465)
    assert "starttls" not in conn.calls
    # sender falls back to the login name
    assert conn.messages[0]["From"] == "Essence Boutique <orders@essence-shop.com>"
    assert conn.messages[0].get_content().strip() == "Plain body"


def test_plain_connection_without_tls(monkeypatch, smtp):
    use_settings(monkeypatch, SMTP_PORT=25, SMTP_USE_TLS=False)

    email_client.send_email("alice@essence-shop.com", "Hi", "body")

    assert smtp[0].calls[0] == ("login", "orders@essence-shop.com", "app-password")


def test_connection_closed_when_send_fails(monkeypatch, smtp):
    use_settings(monkeypatch)

    def refuse(self, msg):
        raise smtplib.SMTPRecipientsRefused({"alice@essence-shop.com": (550, b"no")})

    monkeypatch.setattr(FakeSMTP, "send_message", refuse)

    with pytest.raises(smtplib.SMTPRecipientsRefused):
        email_client.send_email("alice@essence-shop.com", "Hi", "body")
    assert smtp[0].calls[-1] == "quit"

"""Email service tests."""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from trustlink.services.email import (
    ConsoleEmailBackend,
    EmailService,
    ResendEmailBackend,
    SMTPEmailBackend,
    get_email_backend,
)
from trustlink.services.notifications import ResultsSummary, SummaryLine


def _summary(fully_verified: bool = True) -> ResultsSummary:
    return ResultsSummary(
        headline="Fully Verified" if fully_verified else "Verification Issues Found",
        fully_verified=fully_verified,
        results_link="http://app.test/results/abc",
        lines=[
            SummaryLine(label="ID Verification", passed=True, detail="Verified, name match confirmed"),
            SummaryLine(label="Property Ownership", passed=fully_verified, detail="<b>Ownership</b>"),
        ],
    )


class TestConsoleEmailBackend:
    """Tests for console email backend."""

    @pytest.mark.asyncio
    async def test_send_logs_email(self, caplog):
        backend = ConsoleEmailBackend()

        with caplog.at_level(logging.INFO):
            result = await backend.send(
                to="buyer@example.com",
                subject="Results",
                html="<p>Hello</p>",
                text="Hello",
            )

        assert result is True
        assert "buyer@example.com" in caplog.text
        assert "Results" in caplog.text


class TestSMTPEmailBackend:
    """Tests for SMTP email backend."""

    def _backend(self) -> SMTPEmailBackend:
        return SMTPEmailBackend(
            host="smtp.example.com",
            port=587,
            username="user",
            password="pass",
            from_address="noreply@example.com",
        )

    @pytest.mark.asyncio
    async def test_send_success(self):
        with patch("trustlink.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            result = await self._backend().send(
                to="buyer@example.com",
                subject="Results",
                html="<p>Hello</p>",
                text="Hello",
            )

        assert result is True
        mock_send.assert_called_once()
        message = mock_send.call_args[0][0]
        assert message["To"] == "buyer@example.com"
        assert mock_send.call_args.kwargs["hostname"] == "smtp.example.com"

    @pytest.mark.asyncio
    async def test_send_failure(self):
        with patch(
            "trustlink.services.email.aiosmtplib.send",
            new_callable=AsyncMock,
            side_effect=Exception("Connection failed"),
        ):
            result = await self._backend().send(
                to="buyer@example.com",
                subject="Results",
                html="<p>Hello</p>",
            )

        assert result is False


class TestResendEmailBackend:
    """Tests for Resend email backend."""

    @pytest.mark.asyncio
    async def test_send_success(self):
        backend = ResendEmailBackend(api_key="re_test_key", from_address="noreply@example.com")

        mock_response = MagicMock()
        mock_response.raise_for_status = MagicMock()

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = mock_response

            result = await backend.send(
                to="buyer@example.com",
                subject="Results",
                html="<p>Hello</p>",
                text="Hello",
            )

            assert result is True
            call_kwargs = mock_post.call_args[1]
            assert call_kwargs["json"]["to"] == ["buyer@example.com"]
            assert call_kwargs["json"]["text"] == "Hello"
            assert call_kwargs["headers"]["Authorization"] == "Bearer re_test_key"

    @pytest.mark.asyncio
    async def test_send_http_error(self):
        backend = ResendEmailBackend(api_key="re_test_key", from_address="noreply@example.com")

        mock_response = MagicMock()
        mock_response.status_code = 401
        mock_response.text = "Unauthorized"
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Unauthorized",
            request=MagicMock(),
            response=mock_response,
        )

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = mock_response

            result = await backend.send(to="buyer@example.com", subject="Results", html="<p>Hi</p>")

            assert result is False

    @pytest.mark.asyncio
    async def test_send_network_error(self):
        backend = ResendEmailBackend(api_key="re_test_key", from_address="noreply@example.com")

        with patch(
            "httpx.AsyncClient.post",
            new_callable=AsyncMock,
            side_effect=httpx.ConnectError("Network error"),
        ):
            result = await backend.send(to="buyer@example.com", subject="Results", html="<p>Hi</p>")

            assert result is False


class TestGetEmailBackend:
    """Tests for get_email_backend factory."""

    def test_console_backend(self):
        with patch("trustlink.services.email.settings") as mock_settings:
            mock_settings.email_backend = "console"
            assert isinstance(get_email_backend(), ConsoleEmailBackend)

    def test_smtp_backend(self):
        with patch("trustlink.services.email.settings") as mock_settings:
            mock_settings.email_backend = "smtp"
            mock_settings.smtp_host = "smtp.example.com"
            mock_settings.smtp_port = 587
            mock_settings.smtp_username = "user"
            mock_settings.smtp_password = "pass"
            mock_settings.smtp_use_tls = True
            mock_settings.email_from = "noreply@example.com"

            backend = get_email_backend()

            assert isinstance(backend, SMTPEmailBackend)
            assert backend.host == "smtp.example.com"

    def test_resend_backend(self):
        with patch("trustlink.services.email.settings") as mock_settings:
            mock_settings.email_backend = "resend"
            mock_settings.resend_api_key = "re_test_key"
            mock_settings.email_from = "noreply@example.com"

            assert isinstance(get_email_backend(), ResendEmailBackend)

    def test_unknown_backend(self):
        with patch("trustlink.services.email.settings") as mock_settings:
            mock_settings.email_backend = "pigeon"
            with pytest.raises(ValueError):
                get_email_backend()


class TestEmailService:
    """Tests for the results summary email."""

    @pytest.mark.asyncio
    async def test_send_results_summary(self):
        backend = MagicMock()
        backend.send = AsyncMock(return_value=True)
        service = EmailService(backend=backend)

        result = await service.send_results_summary("buyer@example.com", _summary())

        assert result is True
        kwargs = backend.send.call_args.kwargs
        assert kwargs["to"] == "buyer@example.com"
        assert "Fully Verified" in kwargs["html"]
        assert "http://app.test/results/abc" in kwargs["html"]
        assert "View full results: http://app.test/results/abc" in kwargs["text"]

    @pytest.mark.asyncio
    async def test_summary_html_is_escaped(self):
        backend = MagicMock()
        backend.send = AsyncMock(return_value=True)
        service = EmailService(backend=backend)

        await service.send_results_summary("buyer@example.com", _summary(fully_verified=False))

        html = backend.send.call_args.kwargs["html"]
        assert "<b>Ownership</b>" not in html
        assert "&lt;b&gt;Ownership&lt;/b&gt;" in html
        assert "Verification Issues Found" in html

    def test_backend_lazy_loaded(self):
        service = EmailService()
        with patch("trustlink.services.email.get_email_backend") as mock_factory:
            mock_factory.return_value = ConsoleEmailBackend()
            assert isinstance(service.backend, ConsoleEmailBackend)
            assert isinstance(service.backend, ConsoleEmailBackend)
            mock_factory.assert_called_once()

"""Result notifications for buyers and sellers.

Dispatch is fire-and-forget: every channel failure is logged and swallowed,
and nothing here can block or undo a completed verification.
"""

import logging
from dataclasses import dataclass, field

from trustlink.models import (
    CheckKind,
    CheckStatus,
    VerificationResult,
    VerificationSession,
    VerificationType,
)
from trustlink.services.aggregator import is_fully_verified
from trustlink.services.email import EmailService, email_service
from trustlink.services.sequencer import required_checks
from trustlink.services.sms import SmsBackend, get_sms_backend
from trustlink.services.tokens import normalize_phone, results_url

logger = logging.getLogger(__name__)

TYPE_LABELS: dict[VerificationType, str] = {
    VerificationType.ID_NUMBER: "Identity",
    VerificationType.PROPERTY: "Property Ownership",
    VerificationType.VEHICLE: "Vehicle Ownership",
    VerificationType.BOTH: "Property & Vehicle Ownership",
}

CHECK_LABELS: dict[CheckKind, str] = {
    CheckKind.IDENTITY: "ID Verification",
    CheckKind.PROPERTY: "Property Ownership",
    CheckKind.VEHICLE: "Vehicle Ownership",
}


@dataclass(frozen=True)
class SummaryLine:
    label: str
    passed: bool
    detail: str


@dataclass
class ResultsSummary:
    """Human-readable summary of a completed verification."""

    headline: str
    fully_verified: bool
    results_link: str
    lines: list[SummaryLine] = field(default_factory=list)

    def as_text(self) -> str:
        body = [
            "TrustLink Verification Results",
            "",
            "Verification completed by seller",
            "",
            self.headline,
        ]
        body.extend(f"- {line.label}: {line.detail}" for line in self.lines)
        body.extend(["", f"View full results: {self.results_link}"])
        return "\n".join(body)


@dataclass
class DispatchReport:
    """Which channels accepted a notification."""

    buyer_email: bool = False
    buyer_sms: bool = False
    seller_sms: bool = False

    @property
    def buyer_notified(self) -> bool:
        return self.buyer_email or self.buyer_sms


def _describe(verification_result: VerificationResult, kind: CheckKind) -> SummaryLine:
    status = verification_result.check_status(kind)
    match = verification_result.check_match(kind)
    label = CHECK_LABELS[kind]

    if status != CheckStatus.VERIFIED:
        return SummaryLine(label=label, passed=False, detail="Not verified")
    if kind == CheckKind.IDENTITY:
        detail = "Verified, name match confirmed" if match else "Verified, name mismatch"
    else:
        detail = "Ownership confirmed" if match else "Ownership not confirmed"
    return SummaryLine(label=label, passed=bool(match), detail=detail)


def build_summary(
    verification: VerificationSession, verification_result: VerificationResult
) -> ResultsSummary:
    """Summarise the checks the session's verification type required."""
    verification_type = VerificationType(verification.verification_type)
    fully_verified = is_fully_verified(verification_result, verification_type)
    return ResultsSummary(
        headline="Fully Verified" if fully_verified else "Verification Issues Found",
        fully_verified=fully_verified,
        results_link=results_url(verification.session_token),
        lines=[_describe(verification_result, kind) for kind in required_checks(verification_type)],
    )


def sms_number(phone: str) -> str:
    """Digits-only number, keeping a leading + for international format."""
    digits = normalize_phone(phone)
    return f"+{digits}" if phone.strip().startswith("+") else digits


class NotificationDispatcher:
    """Sends result summaries over email with SMS as the fallback channel."""

    def __init__(
        self,
        email: EmailService | None = None,
        sms: SmsBackend | None = None,
    ):
        self.email = email or email_service
        self._sms = sms

    @property
    def sms(self) -> SmsBackend:
        """Lazy-load the SMS backend."""
        if self._sms is None:
            self._sms = get_sms_backend()
        return self._sms

    async def _send_email(self, to: str, summary: ResultsSummary) -> bool:
        try:
            return await self.email.send_results_summary(to=to, summary=summary)
        except Exception as e:
            logger.error(f"Results email to buyer failed: {e!r}")
            return False

    async def _send_sms(self, phone: str, body: str) -> bool:
        number = sms_number(phone)
        if not number:
            return False
        try:
            return await self.sms.send(number, body)
        except Exception as e:
            logger.error(f"SMS notification failed: {e!r}")
            return False

    async def send_results_summary(
        self, verification: VerificationSession, verification_result: VerificationResult
    ) -> DispatchReport:
        """Notify buyer (email, else SMS) and seller (SMS). Never raises."""
        report = DispatchReport()
        summary = build_summary(verification, verification_result)

        if verification.buyer_email:
            report.buyer_email = await self._send_email(verification.buyer_email, summary)
        if not report.buyer_email:
            report.buyer_sms = await self._send_sms(verification.buyer_phone, summary.as_text())

        type_label = TYPE_LABELS[VerificationType(verification.verification_type)]
        report.seller_sms = await self._send_sms(
            verification.seller_phone,
            f"TrustLink: your {type_label} verification is complete. "
            "The buyer has been notified of the results.",
        )

        if not report.buyer_notified:
            logger.warning(f"Buyer for session {verification.id} could not be notified")
        return report

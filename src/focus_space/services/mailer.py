"""Booking notification emails over SMTP."""

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from ..core.config import Settings, get_settings
from ..models.booking import Booking, BookingType
from ..models.course import CourseCategory

logger = logging.getLogger(__name__)

STUDIO_NAME = "Focus Space 專心練運動空間"

CATEGORY_LABELS = {
    CourseCategory.PERSONAL: "個人課程",
    CourseCategory.GROUP: "團體課程",
    CourseCategory.SPECIAL: "特殊課程",
}

TRIAL_NOTES = [
    "體驗時間約 60 分鐘，包含完整場館導覽",
    "專業設備介紹與使用說明",
    "一對一教練諮詢與健身計劃建議",
    "免費體驗，無任何隱藏費用",
]


def booking_subject(booking: Booking) -> str:
    if booking.booking_type == BookingType.TRIAL:
        return "Focus Space 場館體驗預約確認"
    return "Focus Space 課程預約確認"


def booking_body(booking: Booking) -> str:
    """Plain-text summary of a booking for the customer email."""
    is_trial = booking.booking_type == BookingType.TRIAL
    lines = [
        f"{booking.customer_name} 您好，",
        "",
        f"感謝您預約 {STUDIO_NAME}，以下是您的預約資訊：",
        "",
        f"預約類型：{'場館體驗' if is_trial else '課程預約'}",
        f"預約編號：{booking.booking_number}",
        f"聯絡電話：{booking.customer_phone}",
        f"電子郵件：{booking.customer_email}",
    ]
    if booking.created_at:
        lines.append(f"預約時間：{booking.created_at:%Y-%m-%d %H:%M}")

    if is_trial:
        if booking.preferred_date:
            lines.append(f"希望日期：{booking.preferred_date}")
        if booking.preferred_time:
            lines.append(f"希望時段：{booking.preferred_time}")
        lines.append("")
        lines.extend(f"- {note}" for note in TRIAL_NOTES)
    else:
        lines.append(f"課程名稱：{booking.course_name}")
        if booking.course_category:
            lines.append(f"課程類型：{CATEGORY_LABELS[booking.course_category]}")
        if booking.booking_date:
            lines.append(
                f"上課日期：{booking.booking_date.isoformat()} "
                f"{booking.start_time}-{booking.end_time}"
            )
        if booking.duration:
            lines.append(f"課程時長：{booking.duration}分鐘")
        lines.append(f"參與人數：{booking.participant_count}人")
        lines.append(f"課程費用：NT$ {booking.total_price:,.0f}")
        if booking.course_requirements:
            lines.append(f"上課要求：{booking.course_requirements}")

    if booking.customer_note:
        lines.extend(["", f"備註：{booking.customer_note}"])

    lines.extend(["", "我們將盡快與您聯繫確認預約，期待與您見面！", "", STUDIO_NAME])
    return "\n".join(lines)


def confirmation_body(booking: Booking) -> str:
    lines = [
        f"{booking.customer_name} 您好，",
        "",
        f"您的預約（編號 {booking.booking_number}）已確認。",
    ]
    if booking.booking_date:
        lines.append(
            f"上課時間：{booking.booking_date.isoformat()} {booking.start_time}-{booking.end_time}"
        )
    if booking.course_name:
        lines.append(f"課程名稱：{booking.course_name}")
    lines.extend(["", "如需更改或取消，請提前與我們聯繫。", "", STUDIO_NAME])
    return "\n".join(lines)


class Mailer:
    """Sends booking emails; does nothing when SMTP is not configured."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    @property
    def enabled(self) -> bool:
        return self.settings.mail_enabled

    async def send_booking_created(self, booking: Booking) -> bool:
        """Email the customer and, when configured, the studio inbox."""
        if not self.enabled:
            logger.info("SMTP not configured, skipping email for %s", booking.booking_number)
            return False

        subject = booking_subject(booking)
        body = booking_body(booking)
        await self._send(booking.customer_email, subject, body)
        if self.settings.mail_notify_to:
            await self._send(self.settings.mail_notify_to, f"[新預約] {subject}", body)
        logger.info("Booking email sent for %s", booking.booking_number)
        return True

    async def send_booking_confirmed(self, booking: Booking) -> bool:
        if not self.enabled:
            logger.info("SMTP not configured, skipping confirmation for %s", booking.booking_number)
            return False

        await self._send(
            booking.customer_email,
            "Focus Space 預約已確認",
            confirmation_body(booking),
        )
        logger.info("Confirmation email sent for %s", booking.booking_number)
        return True

    async def _send(self, to_email: str, subject: str, body: str) -> None:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.settings.mail_from or self.settings.smtp_user
        message["To"] = to_email
        message.set_content(body)

        # smtplib blocks; keep it off the event loop
        await asyncio.to_thread(self._deliver, message)

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=30) as server:
            server.starttls()
            server.login(self.settings.smtp_user, self.settings.smtp_password)
            server.send_message(message)

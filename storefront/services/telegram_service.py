"""Telegram Bot API notifications for new orders and order status changes.

Messages go to a single admin chat through ``sendMessage`` with HTML parse
mode. The notifier is built once at startup from Settings; when the bot token
or chat id is missing it stays disabled and every send is a logged no-op.
"""

import html
import logging
from datetime import datetime, timezone

import httpx

from storefront.config import Settings
from storefront.models.order import Order
from storefront.services.order_service import order_items

logger = logging.getLogger(__name__)

STATUS_EMOJI = {
    "pending": "⏳",
    "processing": "🔄",
    "completed": "✅",
    "cancelled": "❌",
}

STATUS_TEXT = {
    "pending": "Kutilmoqda",
    "processing": "Tayyorlanmoqda",
    "completed": "Yakunlandi",
    "cancelled": "Bekor qilindi",
}


def format_amount(amount) -> str:
    """1234567.0 -> "1 234 567 so'm"."""
    return f"{float(amount or 0):,.0f}".replace(",", " ") + " so'm"


def format_timestamp(value: datetime | None) -> str:
    value = value or datetime.now(timezone.utc)
    return value.strftime("%d.%m.%Y %H:%M:%S")


def format_order_message(order: Order) -> str:
    lines = []
    for index, item in enumerate(order_items(order), start=1):
        variant = f" ({html.escape(item['variant_option'])})" if item.get("variant_option") else ""
        quantity = item.get("quantity", 1)
        lines.append(
            f"{index}. {html.escape(item.get('name', ''))}{variant}\n"
            f"   Miqdor: {quantity} {html.escape(item.get('unit') or 'dona')}\n"
            f"   Narx: {format_amount(float(item.get('price', 0)) * quantity)}"
        )

    address = html.escape(order.customer_address or "") or "Ko'rsatilmagan"
    return (
        "📦 <b>YANGI BUYURTMA</b>\n\n"
        f"👤 <b>Mijoz:</b> {html.escape(order.customer_name)}\n"
        f"📞 <b>Telefon:</b> <code>{html.escape(order.customer_phone)}</code>\n"
        f"📍 <b>Manzil:</b> {address}\n\n"
        "<b>Mahsulotlar:</b>\n"
        + "\n\n".join(lines)
        + f"\n\n💰 <b>Jami summa:</b> <code>{format_amount(order.total_amount)}</code>\n\n"
        f"⏰ <b>Vaqti:</b> {format_timestamp(order.order_date)}"
    )


def format_status_message(order: Order, status: str) -> str:
    return (
        f"{STATUS_EMOJI.get(status, '📦')} <b>BUYURTMA HOLATI O'ZGARTIRILDI</b>\n\n"
        f"👤 <b>Mijoz:</b> {html.escape(order.customer_name)}\n"
        f"📞 <b>Telefon:</b> <code>{html.escape(order.customer_phone)}</code>\n\n"
        f"📊 <b>Yangi holat:</b> <code>{STATUS_TEXT.get(status, html.escape(status))}</code>\n\n"
        f"💰 <b>Summa:</b> <code>{format_amount(order.total_amount)}</code>\n\n"
        f"⏰ <b>Vaqti:</b> {format_timestamp(None)}"
    )


class TelegramNotifier:
    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        *,
        api_base: str = "https://api.telegram.org",
        timeout_seconds: float = 10.0,
    ):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.api_base = api_base.rstrip("/")
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, cfg: Settings) -> "TelegramNotifier":
        return cls(
            cfg.telegram_bot_token,
            cfg.telegram_chat_id,
            api_base=cfg.telegram_api_base,
            timeout_seconds=cfg.telegram_timeout_seconds,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    async def send_message(self, text: str) -> bool:
        """Send *text* to the configured chat. Returns True on success."""
        if not self.enabled:
            logger.info("Telegram notifier not configured, skipping message")
            return False

        url = f"{self.api_base}/bot{self.bot_token}/sendMessage"
        body = {
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        try:
            async with httpx.AsyncClient() as client:
                resp = await client.post(url, json=body, timeout=self.timeout_seconds)
        except httpx.HTTPError as exc:
            logger.warning("Telegram delivery failed: %s", exc)
            return False

        if resp.status_code != 200:
            logger.warning("Telegram API rejected message: %s %s", resp.status_code, resp.text[:200])
            return False
        return True

    async def send_order_notification(self, order: Order) -> bool:
        sent = await self.send_message(format_order_message(order))
        if sent:
            logger.info("Order notification sent to Telegram for order %s", order.id)
        return sent

    async def send_status_update(self, order: Order, status: str) -> bool:
        sent = await self.send_message(format_status_message(order, status))
        if sent:
            logger.info("Status update notification sent to Telegram for order %s", order.id)
        return sent

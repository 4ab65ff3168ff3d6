"""Send a test message through the configured Telegram bot."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from storefront.config import Settings
from storefront.services.telegram_service import TelegramNotifier


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Verify Telegram bot credentials by sending a message.")
    parser.add_argument("--text", default="✅ Storefront Telegram bot is configured correctly.")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    notifier = TelegramNotifier.from_settings(Settings())
    print(f"TELEGRAM_BOT_TOKEN: {'set' if notifier.bot_token else 'NOT SET'}")
    print(f"TELEGRAM_CHAT_ID:   {notifier.chat_id or 'NOT SET'}")
    if not notifier.enabled:
        return 1

    sent = asyncio.run(notifier.send_message(args.text))
    print("Message sent." if sent else "Delivery failed, see log output.")
    return 0 if sent else 1


if __name__ == "__main__":
    raise SystemExit(main())

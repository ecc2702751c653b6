#!/usr/bin/env python3
"""
Diagnostic script for resilient_notifier

Before running:
1. Set environment variables:
   export TELEGRAM_BOT_TOKEN="your_bot_token_here"
   export TELEGRAM_CHAT_ID="your_chat_id_here"

2. Or pass them directly to the script:
   python diagnose_notifier.py --token YOUR_TOKEN --chat-id YOUR_CHAT_ID --send "Hello"
"""

import argparse
import os
import sys
import traceback

from loguru import logger

from resilient_notifier import (
    MessageKind,
    NotifierConfig,
    NotifierError,
    OverallStatus,
    ResilientNotifier,
)


def main():
    parser = argparse.ArgumentParser(description='Diagnose a Telegram notifier setup')
    parser.add_argument('--token', help='Bot token (or set TELEGRAM_BOT_TOKEN env var)')
    parser.add_argument('--chat-id', help='Chat ID (or set TELEGRAM_CHAT_ID env var)')
    parser.add_argument('--send', metavar='TEXT', help='Also deliver TEXT through the retry pipeline')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    args = parser.parse_args()

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO")

    try:
        logger.info("🔧 Building notifier configuration...")
        if args.token or args.chat_id:
            config = NotifierConfig.create(
                args.token or os.getenv("TELEGRAM_BOT_TOKEN", ""),
                args.chat_id or os.getenv("TELEGRAM_CHAT_ID", ""),
            )
        else:
            config = NotifierConfig.from_env()
        logger.info(f"✅ Token {config.credentials.masked_token}, chat {config.chat_id}")

        with ResilientNotifier(config) as notifier:
            report = notifier.run_diagnostics()
            print(report.render())

            if args.send:
                logger.info("📤 Sending message...")
                result = notifier.send(args.send, kind=MessageKind.DIAGNOSTIC)
                message_id = (result.get('result') or {}).get('message_id', 'N/A')
                logger.info(f"✅ Message sent! Message ID: {message_id}")

            metrics = notifier.get_metrics()
            logger.info(
                f"📊 sent={metrics.successful_messages} failed={metrics.failed_messages} "
                f"retries={metrics.retry_attempts} rate_limit_hits={metrics.rate_limit_hits}"
            )

        sys.exit(0 if report.overall_status is not OverallStatus.CRITICAL else 2)

    except NotifierError as e:
        logger.error(f"❌ {type(e).__name__}: {e}")
        logger.info("\nMake sure to:")
        logger.info("1. Set TELEGRAM_BOT_TOKEN environment variable")
        logger.info("2. Set TELEGRAM_CHAT_ID environment variable")
        logger.info("3. Or pass --token and --chat-id arguments")
        sys.exit(1)

    except Exception as e:
        logger.error(f"❌ Unexpected error occurred: {e}")
        logger.error(f"Error type: {type(e).__name__}")
        logger.debug(traceback.format_exc())
        sys.exit(1)


if __name__ == "__main__":
    main()

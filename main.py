"""
main.py
-------
Entry point for Invoice Me.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Serve the HTTP API (including the cron trigger).
    - Start the in-process invoice scheduler unless an external cron is used.
    - Start the Telegram operator console when a bot token is configured.
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from telegram import BotCommand
from telegram.ext import Application, CommandHandler

from api.app import create_app
from config import API_HOST, API_PORT, EXTERNAL_CRON, TELEGRAM_BOT_TOKEN
from db.connection import close_pool, init_pool
from db.init_db import create_tables
from handlers.export_handler import export_csv_command, export_excel_command
from handlers.invoice_handler import (
    backfill_command,
    email_status_command,
    history_command,
    invoices_command,
    paid_command,
    process_command,
    schedule_command,
    send_now_command,
)
from handlers.start_handler import help_command, myid_command, start_command
from services.scheduler import InvoiceScheduler
from utils.logger import get_logger

logger = get_logger(__name__)


async def set_bot_commands(application: Application) -> None:
    """Register bot commands menu in Telegram on startup."""
    commands = [
        BotCommand("start", "🚀 Iniciar el bot"),
        BotCommand("help", "📖 Ver la ayuda"),
        BotCommand("schedule", "🔁 Programar factura recurrente"),
        BotCommand("send_now", "⚡ Enviar factura ahora"),
        BotCommand("invoices", "📋 Facturas programadas"),
        BotCommand("history", "📄 Facturas enviadas"),
        BotCommand("paid", "✅ Marcar pagada / pendiente"),
        BotCommand("backfill", "🗂️ Registrar envío pasado"),
        BotCommand("process", "📧 Procesar facturas vencidas"),
        BotCommand("email_status", "✉️ Estado del correo"),
        BotCommand("export_csv", "📄 Exportar CSV"),
        BotCommand("export_excel", "📊 Exportar Excel"),
        BotCommand("myid", "🆔 Tu ID de Telegram"),
    ]
    await application.bot.set_my_commands(commands)
    logger.info("Bot commands menu registered successfully.")


def build_bot(token: str, app: FastAPI) -> Application:
    """Build the Telegram console, sharing the API's services through bot_data."""
    application = Application.builder().token(token).build()
    application.bot_data["invoice_service"] = app.state.invoice_service
    application.bot_data["processor"] = app.state.processor
    application.bot_data["export_service"] = app.state.export_service

    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("myid", myid_command))
    application.add_handler(CommandHandler("schedule", schedule_command))
    application.add_handler(CommandHandler("send_now", send_now_command))
    application.add_handler(CommandHandler("invoices", invoices_command))
    application.add_handler(CommandHandler("history", history_command))
    application.add_handler(CommandHandler("paid", paid_command))
    application.add_handler(CommandHandler("backfill", backfill_command))
    application.add_handler(CommandHandler("process", process_command))
    application.add_handler(CommandHandler("email_status", email_status_command))
    application.add_handler(CommandHandler("export_csv", export_csv_command))
    application.add_handler(CommandHandler("export_excel", export_excel_command))
    return application


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start every background component, and stop them in reverse order."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    init_pool()
    create_tables()

    # ── 2. Scheduling ─────────────────────────────────────
    scheduler: Optional[InvoiceScheduler] = None
    if EXTERNAL_CRON:
        logger.info("EXTERNAL_CRON set: sweeps run only through /api/cron/process-invoices")
    else:
        scheduler = InvoiceScheduler(app.state.processor)
        await scheduler.start()
    app.state.scheduler = scheduler

    # ── 3. Telegram operator console ──────────────────────
    bot: Optional[Application] = None
    if TELEGRAM_BOT_TOKEN:
        logger.info("Starting Telegram operator console...")
        bot = build_bot(TELEGRAM_BOT_TOKEN, app)
        await bot.initialize()
        await bot.start()
        await set_bot_commands(bot)
        await bot.updater.start_polling(drop_pending_updates=True, allowed_updates=["message"])
    else:
        logger.info("TELEGRAM_BOT_TOKEN not set: Telegram console disabled")

    logger.info("🚀 Invoice Me is running!")
    try:
        yield
    finally:
        # ── 4. Cleanup on shutdown ────────────────────────
        if bot:
            await bot.updater.stop()
            await bot.stop()
            await bot.shutdown()
        if scheduler:
            await scheduler.stop()
        await app.state.gateway.aclose()
        close_pool()
        logger.info("Invoice Me stopped.")


app = create_app(lifespan=lifespan)


def main() -> None:
    """Run the API server."""
    uvicorn.run(app, host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    main()

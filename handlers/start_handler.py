"""
handlers/start_handler.py
--------------------------
Handles /start, /help and /myid.
"""

from telegram import Update
from telegram.ext import ContextTypes

from security.auth import authorized_only
from security.rate_limiter import rate_limited
from utils.logger import get_logger

logger = get_logger(__name__)

HELP_TEXT = """
🧾 *Invoice Me*
Facturación automática por correo.

*🔁 Facturas programadas:*
/schedule correo | monto | mensual | día | concepto
También puedes escribirlo en lenguaje natural:
• `/schedule cobrar 1.200.000 a ana@correo.com cada mes el 5 por arriendo`

*⚡ Envío inmediato:*
/send\\_now correo | monto | mensual | concepto

*📋 Consultas:*
/invoices - Facturas programadas
/history - Facturas enviadas
/paid <id> - Marcar pagada / pendiente
/backfill <id> <AAAA-MM-DD> - Registrar un envío pasado

*⚙️ Operación:*
/process - Enviar ahora las facturas vencidas
/email\\_status - Estado del servicio de correo
/export\\_csv - Exportar historial CSV
/export\\_excel - Exportar historial Excel
/myid - Tu ID de Telegram
"""


@authorized_only
@rate_limited
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command - greet the operator."""
    user = update.effective_user
    logger.info(f"Operator {user.id} ({user.first_name}) started the bot.")

    await update.message.reply_text(
        f"¡Hola {user.first_name}! 👋\n"
        f"Desde aquí puedes programar, enviar y hacer seguimiento a tus facturas.\n\n"
        f"Escribe /help para ver todos los comandos.",
    )


@authorized_only
@rate_limited
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command - show all available commands."""
    await update.message.reply_text(HELP_TEXT, parse_mode="Markdown")


async def myid_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /myid command - show the Telegram ID to add to the whitelist."""
    user = update.effective_user
    await update.message.reply_text(
        f"🆔 Tu ID: `{user.id}`\n"
        f"Agrégalo a `ALLOWED_USER_IDS` en el archivo `.env` para proteger el bot.",
        parse_mode="Markdown",
    )

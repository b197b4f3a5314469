"""
handlers/export_handler.py
---------------------------
Handles invoice-history export commands (CSV, Excel).
Delegates to ExportService.
"""

from telegram import Update
from telegram.ext import ContextTypes

from services.schedule_calc import reference_today
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from utils.logger import get_logger

logger = get_logger(__name__)


@authorized_only
@rate_limited
async def export_csv_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export_csv - send the invoice history as CSV."""
    await update.message.reply_text("📄 Preparando archivo CSV...")

    try:
        buffer = context.bot_data["export_service"].export_history_csv()
        await update.message.reply_document(
            document=buffer,
            filename=f"facturas_{reference_today():%Y%m%d}.csv",
            caption="📊 Historial de facturas - CSV",
        )
    except Exception as e:
        logger.error(f"CSV export failed: {e}")
        await update.message.reply_text("❌ Hubo un problema con la exportación. Intenta de nuevo.")


@authorized_only
@rate_limited
async def export_excel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export_excel - send the invoice history as Excel."""
    await update.message.reply_text("📊 Preparando archivo Excel...")

    try:
        buffer = context.bot_data["export_service"].export_history_excel()
        await update.message.reply_document(
            document=buffer,
            filename=f"facturas_{reference_today():%Y%m%d}.xlsx",
            caption="📊 Historial de facturas - Excel",
        )
    except Exception as e:
        logger.error(f"Excel export failed: {e}")
        await update.message.reply_text("❌ Hubo un problema con la exportación. Intenta de nuevo.")

"""
ai/gemini_parser.py
-------------------
Uses Google Gemini 2.5 Flash to turn a free-text billing instruction into
the fields of an invoice request.

Responsibilities:
    - Understand Spanish (and English) operator messages such as
      "cobrar 1.200.000 a ana@correo.com cada mes el 5 por arriendo".
    - Extract: recipient, amount, cadence, cut_off_day, concept.
    - Return a plain dict; validation happens in the Service layer.
"""

import json

import google.generativeai as genai

from config import GEMINI_API_KEY
from utils.logger import get_logger

logger = get_logger(__name__)

# Configure the Gemini client once at module level
genai.configure(api_key=GEMINI_API_KEY)

_model = genai.GenerativeModel("gemini-2.5-flash")

_INVOICE_PROMPT = """Eres un asistente de facturación. Convierte el mensaje del operador en un JSON
que describe una factura recurrente.

## Reglas:

1. **recipient:** el correo electrónico del cliente.
2. **amount:** monto en pesos colombianos, entero y sin decimales. "1.200.000", "1,2 millones" y
   "1200000" son 1200000.
3. **cadence:**
   - "mensual / cada mes / monthly" → "monthly" (por defecto si no se menciona)
   - "quincenal / cada quincena / biweekly" → "biweekly"
4. **cut_off_day:** día del mes del cobro.
   - mensual: 1 a 31; si no se menciona usa 1.
   - quincenal: solo 1 o 16; "primera quincena" → 1, "segunda quincena" → 16.
5. **concept:** descripción corta del cobro.

## Ejemplos:
- "cobrar 1.200.000 a ana@correo.com cada mes el 5 por arriendo" →
  {"recipient":"ana@correo.com","amount":1200000,"cadence":"monthly","cut_off_day":5,"concept":"Arriendo"}
- "honorarios quincenales de 800000 para pagos@empresa.co, segunda quincena" →
  {"recipient":"pagos@empresa.co","amount":800000,"cadence":"biweekly","cut_off_day":16,"concept":"Honorarios"}

## Formato:
Devuelve solo JSON, sin explicación ni markdown:
{"recipient":"<email>","amount":<entero>,"cadence":"monthly|biweekly","cut_off_day":<entero>,"concept":"<texto>"}

Si falta el correo o el monto: {"error":"unclear","question":"<pregunta aclaratoria en español>"}
"""


def _strip_fences(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("```"):
        raw = raw.split("\n", 1)[1] if "\n" in raw else raw[3:]
    if raw.endswith("```"):
        raw = raw[:-3]
    return raw.strip()


def parse_invoice_request(text: str) -> dict:
    """
    Send a free-text billing instruction to Gemini and get structured data back.

    Args:
        text: The raw operator message.

    Returns:
        A dict with keys: recipient, amount, cadence, cut_off_day, concept.
        OR a dict with keys: error, question (if the message is unclear).
    """
    raw = ""
    try:
        response = _model.generate_content(
            [
                {"role": "user", "parts": [{"text": _INVOICE_PROMPT}]},
                {"role": "user", "parts": [{"text": text}]},
            ],
            generation_config=genai.GenerationConfig(
                temperature=0.1,
                max_output_tokens=300,
            ),
        )
        raw = _strip_fences(response.text)
        result = json.loads(raw)
        if not isinstance(result, dict):
            raise json.JSONDecodeError("Expected a JSON object", raw, 0)
        logger.info(f"Gemini parsed invoice request: {result}")
        return result

    except json.JSONDecodeError:
        logger.warning(f"Gemini returned non-JSON: {raw}")
        return {"error": "parse_failed", "question": "No entendí el mensaje. ¿Puedes indicar correo, monto, frecuencia y concepto?"}
    except Exception as e:
        logger.error(f"Gemini API error: {e}")
        return {"error": "api_error", "question": "Hubo un problema analizando el mensaje. Intenta de nuevo."}

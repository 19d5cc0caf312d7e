"""
Invoice Extractor - Pulls structured invoice fields out of raw invoice text via Claude.

The model reply is treated as best effort: the first {...} block is parsed as
JSON, a malformed block comes back as {'raw': reply, 'parseError': True} and a
reply without any block yields None. Nothing here is persisted.
"""

import json
import logging
import re
from typing import Any, Dict, Optional

from ai_service import AIService

logger = logging.getLogger(__name__)

JSON_BLOCK = re.compile(r'\{[\s\S]*\}')

EXTRACTION_PROMPT = """You are extracting structured data from a construction materials invoice or receipt. The file is named "{file_name}".

Extract the following information from this invoice text and return it as JSON:

{{
  "vendorName": "string or null",
  "invoiceNumber": "string or null",
  "invoiceDate": "YYYY-MM-DD or null",
  "totalAmount": number or null,
  "taxAmount": number or null,
  "items": [
    {{
      "description": "string",
      "quantity": number or null,
      "unitPrice": number or null,
      "totalPrice": number or null
    }}
  ]
}}

IMPORTANT: Return ONLY valid JSON, no other text.

Invoice text:
{text}"""


def build_prompt(text: str, file_name: Optional[str] = None) -> str:
    return EXTRACTION_PROMPT.format(file_name=file_name or 'unknown', text=text)


def response_text(response) -> str:
    """Text of the first content block, or '' when it is not a text block."""
    content = getattr(response, 'content', None) or []
    if not content:
        return ''
    first = content[0]
    if getattr(first, 'type', None) != 'text':
        return ''
    return first.text or ''


def parse_extraction(reply: str) -> Optional[Dict[str, Any]]:
    match = JSON_BLOCK.search(reply)
    if not match:
        logger.warning("Invoice extraction reply contained no JSON object")
        return None
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning(f"Invoice extraction reply was not valid JSON: {e}")
        return {'raw': reply, 'parseError': True}


class InvoiceExtractor:
    """Single-shot invoice field extraction."""

    def __init__(self, ai_service: AIService):
        self.ai_service = ai_service

    def extract(self, text: str, file_name: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Extract invoice fields from text.

        Raises:
            AIServiceUnavailable: Claude is not configured
            AIServiceError: the call itself failed
        """
        response = self.ai_service.call_claude(
            messages=[{'role': 'user', 'content': build_prompt(text, file_name)}],
        )
        extracted = parse_extraction(response_text(response))
        logger.info(f"Extracted invoice data from {file_name or 'pasted text'}")
        return extracted

"""
Receipt analysis: turns a base64 receipt image into a parsed JSON record.

Uses Gemini (flash tier) via langchain-google-genai. The request image is
split into MIME type and payload, sent together with the extraction prompt as
a single multimodal message, and the model's text answer is stripped of
markdown fences before being parsed as JSON.

There is no retry and no streaming: one awaited call per request.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date
from typing import Any, Dict, Optional

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import ValidationError

from app import config
from app.errors import ImageTooLargeError, ReceiptValidationError
from app.prompts.receipt_prompt import RECEIPT_PROMPT_TEMPLATE
from app.schemas import DEFAULT_MIME_TYPE, InlineImage, ReceiptRecord

logger = logging.getLogger(__name__)

# matched with fullmatch; "." does not cross newlines
_DATA_URI_RE = re.compile(r"data:(.+);base64,(.+)")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def decode_image(image: str) -> InlineImage:
    """Split an optional ``data:<mime>;base64,`` header from the payload.

    Without a header the whole value is the payload and JPEG is assumed.
    """
    match = _DATA_URI_RE.fullmatch(image)
    if match:
        return InlineImage(mime_type=match.group(1), data=match.group(2))
    return InlineImage(mime_type=DEFAULT_MIME_TYPE, data=image)


def enforce_size_limit(image: InlineImage, limit: Optional[int]) -> None:
    """Reject payloads longer than ``limit`` base64 characters (None = no limit)."""
    if limit is not None and len(image.data) > limit:
        raise ImageTooLargeError(
            f"Image payload is {len(image.data)} base64 characters; the limit is {limit}"
        )


def build_prompt(today: Optional[date] = None) -> str:
    today = today or date.today()
    return RECEIPT_PROMPT_TEMPLATE.format(today=today.isoformat())


def clean_model_text(text: str) -> str:
    """Remove ```json / ``` fences the model adds despite being told not to."""
    return text.replace("```json", "").replace("```", "").strip()


def _reject_constant(constant: str) -> Any:
    raise ValueError(f"Invalid JSON constant {constant}")


def parse_model_response(text: str) -> Any:
    """Clean the model's text answer and parse it as JSON.

    Raises ValueError (json.JSONDecodeError included) when the cleaned text
    is not strict JSON; NaN and Infinity are rejected.
    """
    return json.loads(clean_model_text(text), parse_constant=_reject_constant)


def validate_receipt(parsed: Any) -> dict:
    """Check a parsed answer against the four-field receipt schema."""
    try:
        record = ReceiptRecord.model_validate(parsed)
    except ValidationError as e:
        raise ReceiptValidationError(str(e)) from e
    return record.model_dump()


def _response_text(content: Any) -> str:
    """Flatten an AIMessage content (str or list of parts) into plain text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content)


# ---------------------------------------------------------------------------
# LLM call
# ---------------------------------------------------------------------------

def _get_model(api_key: str) -> ChatGoogleGenerativeAI:
    """Instantiate the Gemini chat model for one request's credential."""
    kwargs: Dict[str, Any] = {
        "model": config.vision_model_name(),
        "google_api_key": api_key,
        "temperature": 0.0,
        "max_retries": config.vision_max_retries(),
    }
    timeout = config.vision_timeout()
    if timeout is not None:
        kwargs["timeout"] = timeout
    return ChatGoogleGenerativeAI(**kwargs)


async def call_vision_model(image: InlineImage, api_key: str) -> str:
    """Send prompt + inline image to Gemini and return the raw text answer."""
    model = _get_model(api_key)

    message = HumanMessage(
        content=[
            {"type": "text", "text": build_prompt()},
            {"type": "image_url", "image_url": {"url": image.to_data_url()}},
        ]
    )

    response = await model.ainvoke([message])
    raw_text = _response_text(response.content)

    logger.debug("Vision model raw response:\n%s", raw_text)
    return raw_text


async def analyze_receipt(image: str, api_key: str) -> Any:
    """Decode ``image``, ask the model about it, and return the parsed JSON.

    The parsed value is returned as-is unless STRICT_RECEIPT_SCHEMA is on, in
    which case it must be a valid ReceiptRecord.
    """
    inline = decode_image(image)
    enforce_size_limit(inline, config.max_image_bytes())

    logger.info(
        "Analyzing receipt image (%s, %d base64 chars) with %s",
        inline.mime_type, len(inline.data), config.vision_model_name(),
    )
    raw_text = await call_vision_model(inline, api_key)
    parsed = parse_model_response(raw_text)

    if config.strict_receipt_schema():
        return validate_receipt(parsed)
    return parsed

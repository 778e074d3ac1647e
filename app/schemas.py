"""
Request, response and error models for the receipt analyzer.

None of these outlive a single request. ``ReceiptRecord`` describes the shape
the prompt asks the model for; it is only enforced when strict schema
validation is switched on.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_MIME_TYPE = "image/jpeg"


class AnalyzeRequest(BaseModel):
	"""Body of POST /api/analyze.

	- image: base64 payload, optionally prefixed with ``data:<mime>;base64,``.
	- apiKey: caller-supplied Gemini key; falls back to the process default.
	"""

	model_config = ConfigDict(populate_by_name=True)

	image: Optional[str] = Field(default=None, description="Base64 image or data URI")
	api_key: Optional[str] = Field(default=None, alias="apiKey")


class InlineImage(BaseModel):
	"""Decoded image: MIME type plus the raw base64 payload."""

	mime_type: str = Field(default=DEFAULT_MIME_TYPE)
	data: str = Field(..., min_length=1)

	def to_data_url(self) -> str:
		return f"data:{self.mime_type};base64,{self.data}"


class ReceiptRecord(BaseModel):
	"""The four fields extracted from a receipt, all as strings."""

	model_config = ConfigDict(extra="ignore")

	date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD")
	name: str = Field(..., description="Store or vendor name")
	currency: str = Field(..., description="Currency symbol or code, e.g. ¥, $, JPY")
	amount: str = Field(..., description="Total paid, commas removed")

	@field_validator("name", "currency", "amount")
	@classmethod
	def _non_blank(cls, v: str) -> str:
		if not v.strip():
			raise ValueError("must not be blank")
		return v


class ErrorEnvelope(BaseModel):
	"""JSON body returned for every failed request."""

	error: str
	details: Optional[str] = None

"""
FastAPI backend for the receipt analyzer.

Exposes:
- GET /              : health/info
- POST /api/analyze  : base64 receipt image -> {date, name, currency, amount}

Every failure is returned as a JSON envelope {"error": ..., "details": ...};
callers never see a raw exception or an empty body.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from app import config
from app.analysis import analyze_receipt
from app.errors import AnalysisError, MissingCredentialError, MissingImageError
from app.schemas import AnalyzeRequest, ErrorEnvelope

logging.basicConfig(
	format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
	level=config.log_level(),
)
logger = logging.getLogger(__name__)

GENERIC_ERROR = "Failed to analyze receipt"

# Rate limiter, keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=config.rate_limit_enabled())

# FastAPI app singleton
app = FastAPI(title="Receipt Analyzer", version="0.1.0")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

LOCAL_ORIGINS = [
	"http://localhost:3000",
	"http://127.0.0.1:3000",
	"http://localhost:4321",
]


def allowed_origins() -> List[str]:
	"""Local frontend dev servers plus an optional production origin."""
	origins = list(LOCAL_ORIGINS)
	if config.frontend_origin():
		origins.append(config.frontend_origin())
	return origins


app.add_middleware(
	CORSMiddleware,
	allow_origins=allowed_origins(),
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
	async def dispatch(self, request, call_next):
		response = await call_next(request)
		response.headers["X-Content-Type-Options"] = "nosniff"
		response.headers["X-Frame-Options"] = "DENY"
		response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
		response.headers["Permissions-Policy"] = "camera=(), microphone=(), geolocation=()"
		return response

app.add_middleware(SecurityHeadersMiddleware)


def _error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
	envelope = ErrorEnvelope(error=error, details=details)
	return JSONResponse(status_code=status_code, content=envelope.model_dump(exclude_none=True))


def _describe(exc: Exception) -> str:
	"""Exception message, or the class name when the message is empty."""
	return str(exc) or type(exc).__name__


@app.get("/")
def info() -> Dict[str, Any]:
	return {
		"status": "ok",
		"version": app.version,
		"endpoints": ["/", "/api/analyze"],
		"model": config.vision_model_name(),
	}


@app.post("/api/analyze")
@limiter.limit(config.analyze_rate_limit)
async def analyze(request: Request) -> JSONResponse:
	"""Extract date, vendor, currency and amount from a receipt image.

	Malformed request JSON is reported through the same 500 envelope as every
	other unexpected failure.
	"""
	try:
		body = await request.json()
		if not isinstance(body, dict):
			raise ValueError("Request body must be a JSON object")
		if not body.get("image"):
			raise MissingImageError()
		payload = AnalyzeRequest.model_validate(body)

		api_key = payload.api_key or config.default_api_key()
		if not api_key:
			raise MissingCredentialError()

		result = await analyze_receipt(payload.image, api_key)
		return JSONResponse(status_code=200, content=result)
	except AnalysisError as e:
		logger.warning("Rejected analyze request: %s (%s)", e.error, e.status_code)
		return _error_response(e.status_code, e.error, e.details)
	except Exception as e:
		logger.exception("Error analyzing receipt")
		return _error_response(500, GENERIC_ERROR, _describe(e))

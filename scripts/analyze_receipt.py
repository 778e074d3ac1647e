#!/usr/bin/env python3
"""
Quick smoke test: post a local receipt image to the running analyzer and
print the extracted record.

Usage:
    python scripts/analyze_receipt.py <path_to_receipt_image> [--api-key KEY]

Example:
    uvicorn app.main:app --reload
    python scripts/analyze_receipt.py uploads/sample_receipt.jpg

Without --api-key the server falls back to its own GEMINI_API_KEY.
"""

from __future__ import annotations

import argparse
import base64
import json
import sys
from pathlib import Path

import httpx

BASE_URL = "http://127.0.0.1:8000"
TIMEOUT = 120.0

MIME_MAP = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".heic": "image/heic",
}


def to_data_uri(path: Path) -> str:
    mime = MIME_MAP.get(path.suffix.lower(), "image/jpeg")
    b64 = base64.standard_b64encode(path.read_bytes()).decode("utf-8")
    return f"data:{mime};base64,{b64}"


def analyze(image_path: Path, base_url: str, api_key: str | None = None) -> httpx.Response:
    payload = {"image": to_data_uri(image_path)}
    if api_key:
        payload["apiKey"] = api_key
    return httpx.post(f"{base_url}/api/analyze", json=payload, timeout=TIMEOUT)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Send a receipt image to /api/analyze")
    parser.add_argument("image", type=Path, help="Path to a receipt image")
    parser.add_argument("--api-key", default=None, help="Gemini API key (optional)")
    parser.add_argument("--base-url", default=BASE_URL, help=f"Server URL (default: {BASE_URL})")
    args = parser.parse_args(argv)

    if not args.image.exists():
        print(f"ERROR: file not found: {args.image}")
        return 1

    print(f"Uploading {args.image.name} to {args.base_url}/api/analyze ...")
    resp = analyze(args.image, args.base_url, args.api_key)

    print(f"\n=== RESPONSE ({resp.status_code}) ===")
    try:
        print(json.dumps(resp.json(), indent=2, ensure_ascii=False))
    except ValueError:
        print(resp.text)
    return 0 if resp.status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())

"""
Prompt template for receipt analysis.

Asks Gemini for exactly four fields and a bare JSON object. The template is
rendered with today's date so the model has something to fall back on when
the receipt date is unreadable.
"""

RECEIPT_PROMPT_TEMPLATE = """\
Analyze this receipt image and extract the following information in JSON format:
- date: The date of the transaction (YYYY-MM-DD format). If not found, use today's date ({today}).
- name: The name of the store or vendor. Simplify if too long.
- currency: The currency symbol or code (e.g., ¥, $, JPY).
- amount: The total amount paid. Remove commas.

Example output:
{{
  "date": "2023-10-27",
  "name": "SevenEleven",
  "currency": "¥",
  "amount": "1200"
}}

Only return the JSON object, no markdown code blocks.
"""

"""Purchase receipt OCR service.

Extracts vendor, date, totals and line items from receipt text using
per-vendor regular-expression templates, with an HTTP API, OCR upload
handling and a command-line interface around the extraction engine.
"""

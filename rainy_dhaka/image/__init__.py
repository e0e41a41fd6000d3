"""Image generation adapter package.

Scope:
    Builds the multimodal `generateContent` request, sends it to Gemini, and
    extracts the first returned image.

Non-goals:
    - No file ingestion (see `rainy_dhaka.api.multimodal`).
    - No retry, batching or request queuing.
"""

"""File intake package for API adapters.

Architectural role:
- Converts one selected file into base64 inline image data.

Scope:
- Content preprocessing only; no HTTP endpoint definitions.
"""

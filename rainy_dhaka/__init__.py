"""rainy-dhaka: upload a photo, restyle it with Gemini, download the result.

Package layout:
    - `core`: session controller and data contracts.
    - `image`: provider configuration, transport, payload/response handling.
    - `api`: HTTP page adapter, page rendering, terminal CLI, file intake.
"""

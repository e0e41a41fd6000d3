"""rainy-dhaka API adapter package.

Architectural role:
- Defines the external interaction boundary for the HTTP page and the CLI.
- Performs transport-level parsing and response shaping.
- Delegates session state and generation to the core controller.
"""

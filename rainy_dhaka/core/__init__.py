"""Core session package.

Architectural role:
    Holds the Image Transform Controller that sits between API/CLI adapters
    and the image service, plus the data contracts it owns.

Composition:
    - `controller`: action handlers and affordance derivation.
    - `types`: uploaded image, generation result, UI state and view snapshot.
"""

"""Tutoring adapter modules.

Intent:
    Adapters are selected by dotted module path (see `learning.config`); each
    module exposes a `build()` function returning an object that implements
    `TutorAdapterProtocol`.
"""

__all__ = ["local_tutor", "stub_tutor"]

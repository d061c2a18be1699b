"""
Bouncer - Views Package
=======================

Discord UI components: the bouncer panel and the access code modal.
"""

from .bouncer import (
    BouncerView,
    CodeEntryModal,
    EnterCodeButton,
    RoleButton,
    build_bouncer_message,
    setup_bouncer_views,
)

__all__ = [
    "BouncerView",
    "CodeEntryModal",
    "EnterCodeButton",
    "RoleButton",
    "build_bouncer_message",
    "setup_bouncer_views",
]

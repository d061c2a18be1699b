"""
Bouncer - Utils Package
=======================

Helper functions and classes usable anywhere in the codebase: error
handling, interaction responses, cooldowns, duration parsing, async
helpers and HTTP error logging.

Import from the submodules directly, e.g.
``from bouncer.utils.interaction import safe_respond``.
"""

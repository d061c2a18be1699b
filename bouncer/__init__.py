"""
Bouncer Discord Bot
===================

Community gatekeeper: role-selection buttons, a secret access code with
attempt tracking and automatic ejection, and moderation commands.
"""

__version__ = "1.0.0"

"""
Bouncer - Services Package
==========================

Domain services behind the bouncer panel.

Available Services:
    attempts: Attempt records, their log channel store and the tracker
    gate: AccessGate (code submissions), EscalationNotifier (lockouts)
          and the shared role grant routine
"""

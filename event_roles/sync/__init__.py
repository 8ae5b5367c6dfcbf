"""Scheduled Event Role Pipeline.

Gives every scheduled event of the configured guild its own mentionable
role, and grants that role to the event's subscribers.

Usage:
    python -m event_roles.sync               # Reconcile the configured guild
    python -m event_roles.sync --guild-id X  # Reconcile a specific guild
"""

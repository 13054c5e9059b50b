"""Notification outbox and email dispatch for exit-request events."""

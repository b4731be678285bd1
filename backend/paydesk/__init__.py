"""Paydesk — payment collection and receipt generation."""

__version__ = "1.0.0"

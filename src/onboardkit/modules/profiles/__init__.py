"""Profiles module - identity links between login accounts and emails."""

"""Onboardkit - tenant onboarding core for the restaurant hosting platform."""

__version__ = "0.1.0"

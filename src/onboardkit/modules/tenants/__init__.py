"""Tenants module - the tenant registry."""

"""Operational helpers for database setup."""

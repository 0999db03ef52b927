"""Shared fixtures for adapter tests."""

"""Persistence implementations of the storage adapter."""

"""Shared helpers for todo-md."""

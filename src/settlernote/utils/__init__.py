"""Shared helpers for settlernote."""

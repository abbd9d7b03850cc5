"""Utilities for gallery_uploader."""

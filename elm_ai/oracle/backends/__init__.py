"""Concrete oracle backends."""

"""Presentation layer for the Google Calendar gateway."""

from .app import create_app

__all__ = ['create_app']

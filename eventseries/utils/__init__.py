"""Logging and file loading helpers for eventseries."""

"""Shared infrastructure of the temporal algebra: errors, settings, logging, time and geometry helpers."""

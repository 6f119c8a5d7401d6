"""Headless client core of the Noise live-streaming app."""

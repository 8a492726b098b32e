"""Core library for ledwarden."""

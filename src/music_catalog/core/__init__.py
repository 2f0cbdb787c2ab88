"""Core library synchronization logic."""

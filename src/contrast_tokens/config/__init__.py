"""Configuration constants for contrast_tokens."""

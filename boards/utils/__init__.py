"""
Value normalization helpers for the boards app.
"""

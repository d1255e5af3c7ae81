"""
Boards Django application.

This app resolves snowboard product identity across brand sites, retailers,
review sites and LLM lookups, and coalesces every record describing the same
physical board into one canonical board with merged listings and per-field
provenance.
"""

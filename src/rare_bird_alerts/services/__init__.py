"""
Shared utilities.

- http.py - async HTTP client factory and credential redaction
"""

"""
Core utilities shared across the site.

This package hosts configuration helpers (env vars, paths), the CSRF
double-submit helpers and the mailto composer used by the contact form.
Routers and services depend on these primitives instead of reading the
environment themselves.
"""

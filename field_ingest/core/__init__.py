"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Named constants for units, tags and signatures
- exceptions: Custom exception hierarchy
- ingress: HTTP boundary helpers
"""

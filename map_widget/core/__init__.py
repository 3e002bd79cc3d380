"""Core utilities and shared infrastructure.

- config: Field configuration loading and validation
- constants: Reference frames, defaults, named constants
- exceptions: Widget exception hierarchy
"""

"""
Configuration model, defaults, validation and persistence.
"""

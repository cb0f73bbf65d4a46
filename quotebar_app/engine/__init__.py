"""
Quote display engine: pollers, rotation, title rendering and the supervisor
that reconciles them against the active configuration.
"""

"""
Quotebar - Live Quote Display Engine

Polls a market-data provider for a small set of configured instruments and
keeps a compact, failure-tolerant status string up to date in a tray
surface.
"""

__version__ = "0.1.0"
__author__ = "Quotebar Team"

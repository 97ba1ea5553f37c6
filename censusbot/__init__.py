"""
censusbot - WhatsApp menu bot for Tanzania census statistics.
"""

__version__ = "0.1.0"
__logo__ = "📊"

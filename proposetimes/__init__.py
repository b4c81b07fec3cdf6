"""
proposetimes - Propose meeting times from a scheduling provider's open slots.
"""

__version__ = "0.1.0"

"""
Rules engine for the Revolution climbing card game.
"""

__version__ = "1.0.0"

"""
Portfolio Discovery Engine - Core Package

Finds multi-building ownership portfolios in NYC by joining assessor-roll
buildings with HPD registration contacts and clustering shared owners.
"""

__version__ = "0.1.0"

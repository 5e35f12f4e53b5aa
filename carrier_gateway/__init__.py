"""
Carrier Gateway

Carrier-agnostic rate shopping with OAuth token caching and a stable error
taxonomy.
"""
__version__ = "1.0.0"

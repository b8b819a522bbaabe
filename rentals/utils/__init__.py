"""
Utility modules for the rental marketplace API.
"""

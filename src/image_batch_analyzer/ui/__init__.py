"""
Terminal rendering helpers.
"""

"""
Station application layer.
"""

"""
Comments module: create and edit (author only). Comments are never deleted.
"""

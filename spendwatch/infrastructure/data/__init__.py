"""
Data access: readers, writers and lookups.
"""

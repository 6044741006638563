"""
Chunked, sequential upload of canonical records to the inventory backend.
"""

"""Directory layer.

This package owns the authoritative in-memory place list: which source
it came from, how it is kept mirrored into the local snapshot, and the
read-side filter projections over it.
"""

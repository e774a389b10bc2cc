"""Wire-level request builders and response parsers.

Internal to sfmap and may change at any time.
"""

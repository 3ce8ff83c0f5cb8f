"""Binary record codec.

This module serializes flat record streams to a compact byte layout.
It is independent of the text grammar and of tree reconstruction.
"""

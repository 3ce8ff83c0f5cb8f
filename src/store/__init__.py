"""Storage file layer.

This module binds entry trees to files on disk and exposes dotted-key
access, persistence, and file-level conversions.
"""

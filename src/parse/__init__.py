"""Text format parsing.

This module turns storage-file text into ordered flat records.
It reports the first syntax error with its exact line and column.
"""

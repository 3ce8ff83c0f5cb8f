"""Entry tree model and reconstruction.

This module rebuilds parent/child trees from ordered flat records.
It enforces depth continuity and unique sibling keys.
"""

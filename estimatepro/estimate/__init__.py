"""Estimate and quote computation for EstiMate Pro.

Pure, in-memory calculations over a builder's pricing profile and a client
survey response. Nothing in this package performs I/O.
"""

# Uncertainty buffer applied to the base estimate to produce the high estimate
HIGH_ESTIMATE_MULTIPLIER = 1.30

# Australian GST on the quote subtotal
GST_RATE = 0.10

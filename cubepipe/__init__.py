"""
cubepipe - incremental hypercube extraction pipeline

Extract → Transform → Load layers for pulling paginated result matrices
out of an analytic engine session into flat, exportable record sets.
"""

__version__ = "1.0.0"

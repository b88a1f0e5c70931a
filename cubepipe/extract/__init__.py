"""
Extract Layer - Pure I/O against the Analytic Engine

This layer handles all engine data fetching with no export logic.
- No imports from transform or load layers
- Page fetching, fault classification and the paging controller
- Field selections applied before extraction
"""

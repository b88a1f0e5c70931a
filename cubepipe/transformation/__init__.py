"""
Transformation Layer - Pure, Deterministic Functions

This layer turns extraction results into record sets and frames.
- Pure functions (input → output)
- No I/O operations
- Unit testable
- Deterministic results
"""

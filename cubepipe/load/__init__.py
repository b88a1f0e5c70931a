"""
Load Layer - Data Persistence

This layer handles all data persistence operations.
- Local file storage (JSON, CSV, Parquet)
- No business logic, just I/O operations
"""

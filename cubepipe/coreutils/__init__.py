"""
Core Utilities - logging, environment configuration and HTTP helpers
"""

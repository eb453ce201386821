"""
Core modules for Rate Limit Guard.

This package contains the keyword families, payload detection,
and the hook that annotates the rate limit log.
"""

"""
bookingdesk - appointment booking and job tracking for small service businesses.
"""

__version__ = "0.1.0"

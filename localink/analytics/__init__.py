"""
Usage analytics and directory reporting.
"""

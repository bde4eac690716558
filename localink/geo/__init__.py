"""
Geographic helpers.

Responsibilities:
- Validate latitude / longitude pairs.
- Great-circle distance via the Haversine formula.
- Bounding-box approximation used as a cheap radius pre-filter.
"""

"""
OpenStreetMap nearby-business fetch.

Responsibilities:
- Build Overpass QL queries for a bounding box around the user.
- Call the Overpass API.
- Map OSM nodes into directory business records, skipping chains.
"""

"""
Content-based recommendations.

Responsibilities:
- Vectorize businesses against the category taxonomy of the candidate set.
- Build a user preference vector from their bookmarks.
- Rank unseen businesses by cosine similarity, or by rating on cold start.
"""

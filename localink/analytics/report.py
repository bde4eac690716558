from __future__ import annotations

from typing import Any

import pandas as pd

from ..directory.models import BusinessRecord


def build_directory_report(businesses: list[BusinessRecord], top_n: int = 10) -> dict[str, Any]:
    """Summary statistics for the admin report page."""
    if not businesses:
        return {
            "total_businesses": 0,
            "avg_rating": 0.0,
            "total_reviews": 0,
            "categories": [],
            "top_rated": [],
        }

    df = pd.DataFrame(
        [
            {
                "id": b.id,
                "name": b.name,
                "categories": list(dict.fromkeys(b.categories)),
                "avg_rating": b.avg_rating,
                "rating_count": b.rating_count,
            }
            for b in businesses
        ]
    )

    exploded = df.explode("categories").dropna(subset=["categories"])
    per_category = (
        exploded.groupby("categories")
        .agg(count=("id", "size"), avg_rating=("avg_rating", "mean"))
        .reset_index()
        .sort_values(["count", "categories"], ascending=[False, True])
    )
    categories = [
        {
            "name": row["categories"],
            "count": int(row["count"]),
            "avg_rating": round(float(row["avg_rating"]), 2),
        }
        for _, row in per_category.iterrows()
    ]

    # kind="stable" keeps input order among equal ratings
    top = df.sort_values("avg_rating", ascending=False, kind="stable").head(top_n)
    top_rated = [
        {
            "id": row["id"],
            "name": row["name"],
            "avg_rating": float(row["avg_rating"]),
            "rating_count": int(row["rating_count"]),
        }
        for _, row in top.iterrows()
    ]

    return {
        "total_businesses": len(df),
        "avg_rating": round(float(df["avg_rating"].mean()), 2),
        "total_reviews": int(df["rating_count"].sum()),
        "categories": categories,
        "top_rated": top_rated,
    }

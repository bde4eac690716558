from __future__ import annotations

from collections import Counter
from typing import Any


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    explores = [e for e in events if e["type"] == "explore"]
    recommends = [e for e in events if e["type"] == "recommend"]
    total = len(explores)

    # Average response time
    times = [e["response_time_ms"] for e in explores if "response_time_ms" in e]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Top categories
    category_counter: Counter[str] = Counter()
    for e in explores:
        if e.get("category"):
            category_counter[e["category"]] += 1
    top_categories = [{"name": n, "count": c} for n, c in category_counter.most_common(10)]

    # Sort usage
    sort_usage = dict(Counter(e.get("sort_by", "rating") for e in explores))

    # Filter usage rates
    filter_counts = {"category": 0, "search": 0, "location": 0}
    for e in explores:
        if e.get("category"):
            filter_counts["category"] += 1
        if e.get("search_text"):
            filter_counts["search"] += 1
        if e.get("located"):
            filter_counts["location"] += 1
    filter_usage = {
        k: round(v / total * 100, 1) if total else 0.0
        for k, v in filter_counts.items()
    }

    remote_status = dict(Counter(e.get("remote_status", "skipped") for e in explores))
    strategies = dict(Counter(e.get("strategy", "unknown") for e in recommends))

    return {
        "total_explores": total,
        "avg_response_time_ms": avg_time,
        "top_categories": top_categories,
        "sort_usage": sort_usage,
        "filter_usage": filter_usage,
        "remote_status": remote_status,
        "recommendations": {
            "total": len(recommends),
            "strategies": strategies,
        },
    }

from __future__ import annotations

from ..geo.distance import BoundingBox

# Filled once per bbox part; "{bbox}" is "south,west,north,east"
_NODE_STATEMENTS = """  node["shop"]({bbox});
  node["amenity"~"restaurant|cafe|bar|fast_food|pub|bistro|bakery|hairdresser|pharmacy|clinic|bicycle_repair_station|bicycle_rental|bookstore|coworking_space|ice_cream"]({bbox});"""

OVERPASS_QUERY_TEMPLATE = """[out:json][timeout:25];
(
{statements}
);
out body;
>;
out skel qt;"""

# Chains are excluded so the directory stays focused on local businesses
EXCLUDE_BRAND_LIST = frozenset({
    "Starbucks",
    "McDonald's",
    "Subway",
    "Walmart",
    "Costco",
    "Tim Hortons",
    "Taco Bell",
    "KFC",
    "Burger King",
    "Shoppers Drug Mart",
    "Rexall",
    "LCBO",
})


def overpass_bboxes(box: BoundingBox) -> list[tuple[float, float, float, float]]:
    """
    Split *box* into ``(south, west, north, east)`` tuples Overpass accepts.

    Latitudes are clamped to [-90, 90]; a box crossing the antimeridian
    becomes two boxes, and a box spanning the globe covers every longitude.
    """
    south = max(-90.0, box.south)
    north = min(90.0, box.north)

    if box.east - box.west >= 360.0:
        return [(south, -180.0, north, 180.0)]
    if box.west < -180.0:
        return [(south, box.west + 360.0, north, 180.0), (south, -180.0, north, box.east)]
    if box.east > 180.0:
        return [(south, box.west, north, 180.0), (south, -180.0, north, box.east - 360.0)]
    return [(south, box.west, north, box.east)]


def build_overpass_query(box: BoundingBox) -> str:
    statements = "\n".join(
        _NODE_STATEMENTS.format(bbox=f"{s},{w},{n},{e}")
        for s, w, n, e in overpass_bboxes(box)
    )
    return OVERPASS_QUERY_TEMPLATE.format(statements=statements)

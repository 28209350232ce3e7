import math

from territory.models.domain import PolygonPoint
from territory.services.geospatial import (
    EARTH_RADIUS_METERS,
    bounding_box,
    haversine_miles,
    normalize_polygon,
    point_in_polygon,
    polygon_area,
    polygon_from_geojson,
)


def _polygon(*pairs: tuple[float, float]) -> list[PolygonPoint]:
    return [PolygonPoint(latitude=lat, longitude=lng) for lat, lng in pairs]


UNIT_SQUARE = _polygon((0, 0), (0, 1), (1, 1), (1, 0))


def test_point_in_polygon_unit_square():
    assert point_in_polygon(PolygonPoint(0.5, 0.5), UNIT_SQUARE)
    assert not point_in_polygon(PolygonPoint(2, 2), UNIT_SQUARE)
    assert not point_in_polygon(PolygonPoint(-0.5, 0.5), UNIT_SQUARE)


def test_point_in_polygon_edge_tie_break():
    # South and west edges count as inside, north and east edges as outside.
    assert point_in_polygon(PolygonPoint(0.5, 0.0), UNIT_SQUARE)
    assert point_in_polygon(PolygonPoint(0.0, 0.5), UNIT_SQUARE)
    assert not point_in_polygon(PolygonPoint(0.5, 1.0), UNIT_SQUARE)
    assert not point_in_polygon(PolygonPoint(1.0, 0.5), UNIT_SQUARE)


def test_point_in_polygon_horizontal_edge_does_not_raise():
    triangle = _polygon((0, 0), (0, 2), (1, 1))
    assert point_in_polygon(PolygonPoint(0.0, 1.0), triangle) in (True, False)
    assert point_in_polygon(PolygonPoint(0.5, 1.0), triangle)


def test_point_in_polygon_concave_shape():
    # U shape opening to the north
    u_shape = _polygon((0, 0), (3, 0), (3, 1), (1, 1), (1, 2), (3, 2), (3, 3), (0, 3))
    assert point_in_polygon(PolygonPoint(0.5, 1.5), u_shape)
    assert not point_in_polygon(PolygonPoint(2.0, 1.5), u_shape)


def test_point_in_polygon_requires_three_points():
    assert not point_in_polygon(PolygonPoint(0.5, 0.5), _polygon((0, 0), (1, 1)))


def test_bounding_box_skips_non_finite_points():
    polygon = _polygon((10, 20), (12, 25), (float("nan"), 30), (11, float("inf")))
    box = bounding_box(polygon)

    assert (box.min_lat, box.max_lat, box.min_lng, box.max_lng) == (10, 12, 20, 25)
    assert not box.is_empty


def test_bounding_box_of_empty_polygon_is_inverted():
    box = bounding_box([])

    assert box.is_empty
    assert box.min_lat > box.max_lat
    assert box.min_lng > box.max_lng


def test_polygon_area_twenty_meter_square():
    latitude = 40.0
    side = 20.0
    d_lat = math.degrees(side / EARTH_RADIUS_METERS)
    d_lng = d_lat / math.cos(math.radians(latitude))
    square = _polygon(
        (latitude, -75.0),
        (latitude + d_lat, -75.0),
        (latitude + d_lat, -75.0 + d_lng),
        (latitude, -75.0 + d_lng),
    )

    area = polygon_area(square)

    assert math.isclose(area, side * side, rel_tol=1e-3)


def test_polygon_area_ignores_winding_and_small_inputs():
    clockwise = _polygon((0, 0), (0.001, 0), (0.001, 0.001), (0, 0.001))
    counter_clockwise = list(reversed(clockwise))

    assert polygon_area(clockwise) > 0
    assert math.isclose(polygon_area(clockwise), polygon_area(counter_clockwise))
    assert polygon_area(clockwise[:2]) == 0.0


def test_polygon_area_skips_non_finite_vertices():
    square = _polygon((0, 0), (0.001, 0), (0.001, 0.001), (0, 0.001))
    with_gap = square[:2] + [PolygonPoint(float("nan"), 0.0005)] + square[2:]

    assert math.isclose(polygon_area(with_gap), polygon_area(square))
    assert polygon_area(_polygon((0, 0), (float("inf"), 1), (1, float("nan")))) == 0.0


def test_haversine_miles_is_non_negative_and_zero_on_self():
    assert haversine_miles((-75.0, 40.0), (-75.0, 40.0)) == 0.0
    assert haversine_miles((-75.0, 40.0), (-74.0, 41.0)) > 0
    assert haversine_miles((0, 0), (180, 0)) > 0


def test_haversine_miles_uses_lng_lat_order():
    # One degree of latitude is roughly 69.1 miles.
    assert math.isclose(haversine_miles((0, 0), (0, 1)), 69.0975, rel_tol=1e-4)
    # At 60N a degree of longitude is about half a degree of latitude.
    east = haversine_miles((0, 60), (1, 60))
    north = haversine_miles((0, 60), (0, 61))
    assert east < 0.6 * north


def test_normalize_polygon_accepts_mixed_shapes():
    raw = [
        [-75.0, 40.0],
        {"latitude": 40.1, "longitude": -75.1},
        {"lat": 40.2, "lng": -75.2},
        {"coordinates": [-75.3, 40.3]},
        {"lat": "not a number", "lng": -75.4},
        [None, 40.5],
        "garbage",
    ]

    points = normalize_polygon(raw)

    assert points == _polygon((40.0, -75.0), (40.1, -75.1), (40.2, -75.2), (40.3, -75.3))
    assert normalize_polygon(None) == []


def test_polygon_from_geojson_uses_outer_ring():
    boundary = {
        "type": "Polygon",
        "coordinates": [
            [[-75.0, 40.0], [-75.0, 40.1], [-74.9, 40.1], [-75.0, 40.0]],
            [[-74.99, 40.01], [-74.99, 40.02], [-74.98, 40.02], [-74.99, 40.01]],
        ],
    }

    points = polygon_from_geojson(boundary)

    assert len(points) == 4
    assert points[1] == PolygonPoint(latitude=40.1, longitude=-75.0)
    assert polygon_from_geojson({"type": "Point", "coordinates": [-75.0, 40.0]}) == []
    assert polygon_from_geojson(None) == []

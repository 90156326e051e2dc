"""Tests for the obstacle variants: geometry, avoidance forces and updates."""

from __future__ import annotations

import math
import random

import pytest

from swarm_obstacles.config import AvoidanceSettings
from swarm_obstacles.core.geometry import Position, Vector2D
from swarm_obstacles.core.collision import (
    BuildingObstacle,
    ExpandingObstacle,
    MovingObstacle,
    NoFlyZone,
    ObstacleType,
    RiskLevel,
    StaticObstacle,
)


ORIGIN = Position(0.0, 0.0, 0.0)


class TestObstacleIdentity:
    """Ids and classification shared by every variant."""

    def test_ids_are_unique_and_increasing(self):
        first = StaticObstacle(ORIGIN, 1.0, "a")
        second = MovingObstacle(ORIGIN, 1.0, (0, 0, 0), "b")
        third = NoFlyZone(ORIGIN, 1.0, "c")

        assert first.id < second.id < third.id

    def test_types_and_risk_levels(self):
        """Each variant carries its classification."""
        assert StaticObstacle(ORIGIN, 1.0, "tree").obstacle_type == ObstacleType.STATIC
        assert StaticObstacle(ORIGIN, 1.0, "tree").risk_level == RiskLevel.LOW
        assert BuildingObstacle(0, 0, 1, 1, 1, "b").risk_level == RiskLevel.HIGH
        assert NoFlyZone(ORIGIN, 1.0, "z").risk_level == RiskLevel.CRITICAL

        moving = MovingObstacle(ORIGIN, 1.0, (0, 0, 0), "car")
        expanding = ExpandingObstacle(ORIGIN, 1.0, 1.0, 2.0, "fire")
        assert moving.obstacle_type == ObstacleType.DYNAMIC
        assert moving.risk_level == RiskLevel.MEDIUM
        assert moving.is_dynamic
        assert expanding.obstacle_type == ObstacleType.DYNAMIC
        assert expanding.risk_level == RiskLevel.CRITICAL

    def test_str_contains_name(self):
        assert "fire" in str(ExpandingObstacle(ORIGIN, 1.0, 1.0, 2.0, "fire"))
        assert "tower" in str(BuildingObstacle(0, 0, 1, 1, 1, "tower"))

    def test_keyword_construction_and_repr(self):
        obstacle = MovingObstacle(position=ORIGIN, radius=2, velocity=[1, 0, 0], name="drone")

        assert obstacle.radius == 2.0
        assert obstacle.velocity == (1.0, 0.0, 0.0)
        assert "drone" in repr(obstacle)
        assert "avoidance=" not in repr(obstacle)

    def test_id_is_not_a_constructor_argument(self):
        with pytest.raises(TypeError):
            StaticObstacle(ORIGIN, 1.0, "pillar", id=7)

    def test_identity_equality(self):
        """Two obstacles with the same fields are still distinct."""
        first = StaticObstacle(ORIGIN, 1.0, "pillar")
        second = StaticObstacle(ORIGIN, 1.0, "pillar")

        assert first != second
        assert len({first, second}) == 2


class TestObstacleAvoidanceSettings:
    """Per-obstacle avoidance parameters."""

    def test_gain_defaults_from_settings(self):
        settings = AvoidanceSettings(static_gain=20.0, moving_gain=30.0)

        assert StaticObstacle(ORIGIN, 1.0, "pillar", avoidance=settings).avoidance_gain == 20.0
        assert MovingObstacle(ORIGIN, 1.0, (0, 0, 0), "car", avoidance=settings).avoidance_gain == 30.0
        assert NoFlyZone(ORIGIN, 1.0, "zone").avoidance_gain == 100.0

    def test_explicit_gain_overrides_settings(self):
        settings = AvoidanceSettings(building_gain=20.0)
        building = BuildingObstacle(0, 0, 1, 1, 1, "tower", avoidance_gain=5.0, avoidance=settings)

        assert building.avoidance_gain == 5.0

    def test_falloff_offset(self):
        settings = AvoidanceSettings(falloff_offset=5.0)
        obstacle = MovingObstacle(Position(10, 0, 0), 5.0, (0, 0, 0), "car", avoidance=settings)

        force = obstacle.get_avoidance_vector(ORIGIN)
        assert force.x == pytest.approx(-80.0 / 15.0)

    def test_building_falloff_offset(self):
        settings = AvoidanceSettings(falloff_offset=3.0)
        building = BuildingObstacle(0, 0, 10, 10, 20, "tower", avoidance=settings)

        force = building.get_avoidance_vector(Position(15, 5, 5))
        assert force.x == pytest.approx(50.0 / 8.0)

    def test_min_force_denominator(self):
        settings = AvoidanceSettings(min_force_denominator=1.0)
        zone = NoFlyZone(ORIGIN, 10.0, "airport", avoidance=settings)
        fire = ExpandingObstacle(ORIGIN, 5.0, 0.0, 10.0, "fire", avoidance=settings)

        assert zone.get_avoidance_vector(Position(5, 0, 0)).x == pytest.approx(100.0)
        assert fire.get_avoidance_vector(Position(3, 0, 0)).x == pytest.approx(75.0)

    def test_degenerate_distance(self):
        settings = AvoidanceSettings(degenerate_distance=1.0)
        pillar = StaticObstacle(ORIGIN, 2.0, "pillar", avoidance=settings)
        zone = NoFlyZone(ORIGIN, 2.0, "zone", avoidance=settings)
        agent = Position(0.0, 0.5, 7.0)

        assert pillar.get_avoidance_vector(agent) == Vector2D(1.0, 0.0)
        assert pillar.get_closest_point_to(Position(0.0, 0.5, 0.0)) == Position(2.0, 0.0, 0.0)
        assert zone.get_closest_point_to(agent) == Position(2.0, 0.0, 7.0)


class TestStaticObstacle:
    """Test suite for StaticObstacle."""

    def test_update_is_noop(self):
        """Updates never change position or shape."""
        obstacle = StaticObstacle(Position(1, 2, 3), 4.0, "pillar")
        for dt in (0.0, 0.1, 5.0, 1000.0):
            obstacle.update(dt)

        assert obstacle.position == Position(1, 2, 3)
        assert obstacle.radius == 4.0

    def test_contains_point_boundary_inclusive(self):
        obstacle = StaticObstacle(ORIGIN, 5.0, "pillar")

        assert obstacle.contains_point(Position(5.0, 0.0, 0.0))
        assert obstacle.contains_point(Position(3.0, 4.0, 0.0))
        assert obstacle.contains_point(Position(0.0, 0.0, 4.9))
        assert not obstacle.contains_point(Position(5.001, 0.0, 0.0))

    def test_contains_matches_distance(self):
        """containsPoint agrees with distance <= radius."""
        rng = random.Random(7)
        obstacle = StaticObstacle(Position(2, -1, 3), 3.0, "pillar")
        for _ in range(200):
            point = Position(rng.uniform(-5, 9), rng.uniform(-8, 6), rng.uniform(-4, 10))
            expected = obstacle.position.distance_to(point) <= obstacle.radius
            assert obstacle.contains_point(point) == expected

    def test_zero_radius_is_point_hazard(self):
        obstacle = StaticObstacle(Position(1, 1, 1), 0.0, "point")

        assert obstacle.contains_point(Position(1, 1, 1))
        assert not obstacle.contains_point(Position(1, 1, 1.01))

    def test_negative_radius_rejected(self):
        with pytest.raises(ValueError):
            StaticObstacle(ORIGIN, -1.0, "bad")

    def test_avoidance_falloff(self):
        """Force is gain / (distance + 1) away from the center."""
        obstacle = StaticObstacle(ORIGIN, 1.0, "pillar")
        force = obstacle.get_avoidance_vector(Position(4.0, 0.0, 0.0))

        assert force.x == pytest.approx(50.0 / 5.0)
        assert force.y == pytest.approx(0.0)

        far = obstacle.get_avoidance_vector(Position(9.0, 0.0, 0.0))
        assert far.magnitude() < force.magnitude()

    def test_custom_gain(self):
        obstacle = StaticObstacle(ORIGIN, 1.0, "pillar", avoidance_gain=10.0)
        force = obstacle.get_avoidance_vector(Position(0.0, -4.0, 0.0))

        assert force.x == pytest.approx(0.0)
        assert force.y == pytest.approx(-2.0)


class TestSphericalClosestPoint:
    """Closest-point projection onto a sphere."""

    def test_projects_onto_surface(self):
        obstacle = StaticObstacle(ORIGIN, 2.0, "pillar")
        closest = obstacle.get_closest_point_to(Position(10.0, 0.0, 0.0))

        assert closest.to_tuple() == pytest.approx((2.0, 0.0, 0.0))

    def test_projection_keeps_direction(self):
        obstacle = MovingObstacle(Position(1, 1, 1), 5.0, (0, 0, 0), "car")
        closest = obstacle.get_closest_point_to(Position(4, 5, 1))

        assert closest.to_tuple() == pytest.approx((4.0, 5.0, 1.0))
        assert obstacle.position.distance_to(closest) == pytest.approx(5.0)

    def test_agent_at_center_returns_plus_x(self):
        """Degenerate case returns center offset by radius along +X."""
        obstacle = ExpandingObstacle(Position(3, 3, 3), 2.0, 0.0, 2.0, "fire")
        closest = obstacle.get_closest_point_to(Position(3.0, 3.0, 3.005))

        assert closest == Position(5.0, 3.0, 3.0)


class TestMovingObstacle:
    """Test suite for MovingObstacle."""

    def test_update_moves_by_velocity(self):
        obstacle = MovingObstacle(ORIGIN, 1.0, (1.0, 0.0, 0.0), "car")
        obstacle.update(2.0)

        assert obstacle.position == Position(2.0, 0.0, 0.0)

    def test_update_moves_all_axes(self):
        obstacle = MovingObstacle(ORIGIN, 1.0, (1.0, -2.0, 0.5), "bird")
        obstacle.update(0.5)

        assert obstacle.position.to_tuple() == pytest.approx((0.5, -1.0, 0.25))

    def test_set_velocity(self):
        obstacle = MovingObstacle(ORIGIN, 1.0, (1.0, 0.0, 0.0), "car")
        obstacle.set_velocity(0.0, 3.0, 0.0)
        obstacle.update(1.0)

        assert obstacle.velocity == (0.0, 3.0, 0.0)
        assert obstacle.position.to_tuple() == pytest.approx((0.0, 3.0, 0.0))

    def test_invalid_velocity_rejected(self):
        with pytest.raises(ValueError):
            MovingObstacle(ORIGIN, 1.0, (1.0, 2.0), "car")

    def test_avoidance_points_away(self):
        """Obstacle at +X pushes the agent towards -X with 80 / (d + 1)."""
        obstacle = MovingObstacle(Position(10.0, 0.0, 0.0), 5.0, (0, 0, 0), "car")
        force = obstacle.get_avoidance_vector(ORIGIN)

        assert force.x == pytest.approx(-80.0 / 11.0)
        assert force.y == pytest.approx(0.0)

    def test_avoidance_ignores_altitude(self):
        obstacle = MovingObstacle(Position(0.0, 3.0, 0.0), 1.0, (0, 0, 0), "drone")
        low = obstacle.get_avoidance_vector(Position(0.0, 0.0, 0.0))
        high = obstacle.get_avoidance_vector(Position(0.0, 0.0, 100.0))

        assert low == high
        assert low.y == pytest.approx(-80.0 / 4.0)

    def test_avoidance_degenerate_fallback(self):
        """Agent over the center gets the fixed (1, 0) vector."""
        obstacle = MovingObstacle(ORIGIN, 1.0, (0, 0, 0), "car")

        assert obstacle.get_avoidance_vector(Position(0.005, 0.0, 50.0)) == Vector2D(1.0, 0.0)


class TestExpandingObstacle:
    """Test suite for ExpandingObstacle."""

    def test_growth_and_clamp(self):
        obstacle = ExpandingObstacle(ORIGIN, 1.0, 2.0, 10.0, "fire")

        obstacle.update(3.0)
        assert obstacle.radius == pytest.approx(7.0)

        obstacle.update(5.0)
        assert obstacle.radius == pytest.approx(10.0)
        assert obstacle.is_fully_expanded

    def test_radius_monotonic_and_bounded(self):
        """Radius never decreases and never exceeds max_radius."""
        rng = random.Random(3)
        obstacle = ExpandingObstacle(ORIGIN, 0.5, 1.7, 12.0, "smoke")
        previous = obstacle.radius
        for _ in range(100):
            obstacle.update(rng.uniform(0.0, 0.5))
            assert previous <= obstacle.radius <= obstacle.max_radius
            previous = obstacle.radius

    def test_negative_delta_does_not_shrink(self):
        obstacle = ExpandingObstacle(ORIGIN, 3.0, 1.0, 10.0, "fire")
        obstacle.update(-2.0)

        assert obstacle.radius == 3.0

    def test_stays_at_max_radius(self):
        """No decay or disappearance after reaching the maximum."""
        obstacle = ExpandingObstacle(ORIGIN, 1.0, 100.0, 5.0, "fire")
        for _ in range(5):
            obstacle.update(1.0)

        assert obstacle.radius == 5.0
        assert obstacle.contains_point(Position(5.0, 0.0, 0.0))

    def test_invalid_parameters_rejected(self):
        with pytest.raises(ValueError):
            ExpandingObstacle(ORIGIN, 5.0, 1.0, 4.0, "fire")
        with pytest.raises(ValueError):
            ExpandingObstacle(ORIGIN, 1.0, -1.0, 4.0, "fire")

    def test_accessors(self):
        obstacle = ExpandingObstacle(ORIGIN, 1.0, 2.0, 10.0, "fire")
        obstacle.update(1.0)

        assert obstacle.initial_radius == 1.0
        assert obstacle.expansion_rate == 2.0
        assert obstacle.max_radius == 10.0

    def test_avoidance_scales_with_growth(self):
        """scale = 150 * (radius / max_radius) / (distance - radius + 1)."""
        obstacle = ExpandingObstacle(ORIGIN, 5.0, 0.0, 10.0, "fire")
        force = obstacle.get_avoidance_vector(Position(10.0, 0.0, 0.0))

        assert force.x == pytest.approx(150.0 * 0.5 / 6.0)
        assert force.y == pytest.approx(0.0)

    def test_avoidance_near_boundary(self):
        obstacle = ExpandingObstacle(ORIGIN, 5.0, 0.0, 10.0, "fire")
        force = obstacle.get_avoidance_vector(Position(4.5, 0.0, 0.0))

        assert force.x == pytest.approx(75.0 / 0.5)

    def test_avoidance_saturates_inside(self):
        """Inside the hazard the denominator is clamped and the force keeps pointing out."""
        obstacle = ExpandingObstacle(ORIGIN, 5.0, 0.0, 10.0, "fire")
        deep = obstacle.get_avoidance_vector(Position(3.0, 0.0, 0.0))
        deeper = obstacle.get_avoidance_vector(Position(1.0, 0.0, 0.0))

        assert deep.x == pytest.approx(75.0 / 0.1)
        assert deeper.x == pytest.approx(75.0 / 0.1)
        assert deep.y == pytest.approx(0.0)


class TestBuildingObstacle:
    """Test suite for BuildingObstacle."""

    def test_anchor_and_bounds(self):
        building = BuildingObstacle(10, 20, 0, 0, 30, "tower")

        assert building.position == Position(5.0, 10.0, 15.0)
        assert building.get_bounds() == (0, 0, 10, 20)

    def test_contains_point_inclusive(self):
        building = BuildingObstacle(0, 0, 10, 20, 30, "tower")

        assert building.contains_point(Position(0, 0, 0))
        assert building.contains_point(Position(10, 20, 30))
        assert building.contains_point(Position(5, 10, 15))
        assert not building.contains_point(Position(5, 10, 30.5))
        assert not building.contains_point(Position(-0.1, 5, 5))

    def test_closest_point_clamps(self):
        building = BuildingObstacle(0, 0, 10, 20, 30, "tower")

        assert building.get_closest_point_to(Position(15, 10, 40)) == Position(10, 10, 30)
        assert building.get_closest_point_to(Position(-5, -5, -5)) == Position(0, 0, 0)

    def test_avoidance_from_nearest_wall(self):
        building = BuildingObstacle(0, 0, 10, 20, 30, "tower")
        force = building.get_avoidance_vector(Position(15, 10, 5))

        assert force.x == pytest.approx(50.0 / 6.0)
        assert force.y == pytest.approx(0.0)

    def test_avoidance_inside_fallback(self):
        building = BuildingObstacle(0, 0, 10, 20, 30, "tower")

        assert building.get_avoidance_vector(Position(5, 10, 5)) == Vector2D(1.0, 0.0)

    def test_update_is_noop(self):
        building = BuildingObstacle(0, 0, 10, 20, 30, "tower")
        building.update(10.0)

        assert building.position == Position(5.0, 10.0, 15.0)


class TestNoFlyZone:
    """Test suite for NoFlyZone."""

    def test_contains_at_any_altitude(self):
        zone = NoFlyZone(ORIGIN, 10.0, "airport")

        assert zone.contains_point(Position(6, 8, 500))
        assert zone.contains_point(Position(0, 0, -20))
        assert not zone.contains_point(Position(10.1, 0, 0))

    def test_closest_point_keeps_altitude(self):
        zone = NoFlyZone(ORIGIN, 10.0, "airport")

        assert zone.get_closest_point_to(Position(20, 0, 30)).to_tuple() == pytest.approx((10, 0, 30))
        assert zone.get_closest_point_to(Position(0, 0, 7)) == Position(10.0, 0.0, 7)

    def test_avoidance(self):
        zone = NoFlyZone(ORIGIN, 10.0, "airport")
        force = zone.get_avoidance_vector(Position(0, 20, 0))

        assert force.x == pytest.approx(0.0)
        assert force.y == pytest.approx(100.0 / 11.0)

    def test_avoidance_saturates_inside(self):
        zone = NoFlyZone(ORIGIN, 10.0, "airport")
        force = zone.get_avoidance_vector(Position(5, 0, 0))

        assert force.x == pytest.approx(1000.0)
        assert math.isfinite(force.magnitude())

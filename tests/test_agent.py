import math

import numpy as np
import pytest

from boids import Agent


def test_agents_compare_by_identity():
    a = Agent(identity=1, position=[0.0, 0.0], heading=0.0)
    moved = Agent(identity=1, position=[5.0, 5.0], heading=90.0)
    other = Agent(identity=2, position=[0.0, 0.0], heading=0.0)

    assert a == moved
    assert a != other
    assert len({a, moved, other}) == 2


def test_position_is_a_read_only_copy():
    source = np.array([1.0, 2.0], dtype=np.float32)
    agent = Agent(identity=0, position=source)

    source[0] = 99.0
    assert agent.position[0] == 1.0
    with pytest.raises(ValueError):
        agent.position[0] = 3.0


def test_heading_helpers():
    agent = Agent(identity=0, position=[0.0, 0.0], heading=-90.0)

    assert agent.normalized_heading == pytest.approx(270.0)
    np.testing.assert_allclose(agent.direction(), [0.0, -1.0], atol=1e-12)


def test_agent_is_frozen():
    agent = Agent(identity=0)
    with pytest.raises(AttributeError):
        agent.heading = 45.0


def test_heading_of_exactly_360_normalizes_to_zero():
    agent = Agent(identity=0, heading=float(np.float32(359.99999999)))

    assert agent.heading == 360.0
    assert agent.normalized_heading == 0.0
    np.testing.assert_allclose(agent.direction(), [1.0, 0.0], atol=1e-12)

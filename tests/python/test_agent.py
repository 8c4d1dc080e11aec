from __future__ import annotations

from pygame.math import Vector3

from flocking.sim.core.agent import FlockAgent
from flocking.sim.core.config import BehaviorConfig
from flocking.sim.core.group import Group


def _make_agent(agent_id: int) -> FlockAgent:
    return FlockAgent(id=agent_id, position=Vector3(), orientation=Vector3(0, 0, 1), speed=2.0)


def test_agent_uses_slots_and_isolates_defaults():
    agent_a = _make_agent(1)
    agent_b = _make_agent(2)

    assert not hasattr(agent_a, "__dict__")
    assert hasattr(FlockAgent, "__slots__")

    agent_a.velocity_filter.x = 1.5
    agent_a.cohesion_neighbours.append(agent_b)
    assert agent_b.velocity_filter.x == 0.0
    assert agent_b.cohesion_neighbours == []


def test_agent_starts_clear_of_obstacles():
    agent = _make_agent(1)
    assert agent.avoidance_direction is None
    assert not agent.is_avoiding

    agent.avoidance_direction = Vector3(1, 0, 0)
    assert agent.is_avoiding


def test_group_add_assigns_back_reference_and_keeps_order():
    group = Group(BehaviorConfig(), anchor=Vector3(1, 2, 3))
    agents = [group.add(_make_agent(i)) for i in range(3)]

    assert len(group) == 3
    assert group.all_units == agents
    assert [agent.id for agent in group] == [0, 1, 2]
    assert all(agent.group is group for agent in agents)
    assert group.anchor == Vector3(1, 2, 3)


def test_group_clear_drops_back_references():
    group = Group(BehaviorConfig())
    agent = group.add(_make_agent(0))

    group.clear()

    assert len(group) == 0
    assert agent.group is None

import numpy as np
import pytest

from hieramanet.core.config import FormationMode, SimulationParameters, parameters_from_dict
from hieramanet.core.errors import ConfigurationError
from hieramanet.core.vector import Vector3
from hieramanet.mobility.formation import (
    IndependentWaypointFormation,
    RigidOffsetFormation,
    create_formation,
)


def test_rigid_offset_adds_offsets():
    formation = RigidOffsetFormation({0: Vector3(-50, -50, 0), 1: Vector3(50, 50, 0)})
    positions = formation.update(Vector3(10, 20, 0))
    assert positions == {0: Vector3(-40, -30, 0), 1: Vector3(60, 70, 0)}


def test_rigid_offset_is_pure():
    formation = RigidOffsetFormation({0: Vector3(1, 2, 3)})
    first = formation.update(Vector3(5, 5, 5), 1.0)
    second = formation.update(Vector3(5, 5, 5), 99.0)
    assert first == second
    assert formation.offsets == {0: Vector3(1, 2, 3)}


def test_default_parameters_select_rigid_offset():
    formation = create_formation(SimulationParameters(), np.random.default_rng(1))
    assert isinstance(formation, RigidOffsetFormation)
    assert formation.mode == FormationMode.RIGID_OFFSET
    assert formation.offsets == {0: Vector3(-50, -50, 0), 1: Vector3(50, 50, 0)}


def test_custom_offsets_from_parameters():
    params = SimulationParameters(formation_offsets={"A": (0, 10, 0), "B": (0, -10, 0)})
    formation = create_formation(params, np.random.default_rng(1))
    assert formation.update(Vector3(0, 0, 0)) == {0: Vector3(0, 10, 0), 1: Vector3(0, -10, 0)}


def test_missing_offset_is_a_configuration_error():
    params = SimulationParameters(formation_offsets={"A": (0, 10, 0)})
    with pytest.raises(ConfigurationError):
        create_formation(params, np.random.default_rng(1))


def test_independent_waypoint_ignores_super_leader():
    params = SimulationParameters(formation_mode="independent_waypoint")
    formation = create_formation(params, np.random.default_rng(1))
    assert isinstance(formation, IndependentWaypointFormation)

    near = formation.update(Vector3(0, 0, 0), 30.0)
    far = formation.update(Vector3(1000, 1000, 0), 30.0)
    assert near == far
    assert set(near) == {0, 1}
    assert near[0] != near[1]


def test_unknown_mode_is_rejected():
    with pytest.raises(ConfigurationError):
        parameters_from_dict({"formation_mode": "orbit"})

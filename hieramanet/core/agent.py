"""
Agent registry for HieraManet.

The registry owns the identity, role and kinematic state of every agent in
a run: one Super-Leader, two Cluster-Leaders and the Followers of each
cluster. Mobility models receive the registry explicitly and mutate agent
state only through it.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterator, List, Optional

from loguru import logger

from hieramanet.core.config import CLUSTER_LABELS
from hieramanet.core.vector import Vector3


class AgentRole(Enum):
    """Role of an agent in the hierarchy."""
    SUPER_LEADER = "super_leader"      # level 2
    CLUSTER_LEADER = "cluster_leader"  # level 1
    FOLLOWER = "follower"              # level 0


class Agent:
    """
    A mobile agent.

    Identity (id, role, cluster) is fixed at creation; only position and
    velocity change during a run.
    """

    __slots__ = ("_agent_id", "_role", "_cluster_id", "position", "velocity")

    def __init__(
        self,
        agent_id: int,
        role: AgentRole,
        cluster_id: Optional[int] = None,
        position: Vector3 = None,
        velocity: Optional[Vector3] = None,
    ):
        if role == AgentRole.SUPER_LEADER and cluster_id is not None:
            raise ValueError("The super-leader does not belong to a cluster")
        if role != AgentRole.SUPER_LEADER and cluster_id is None:
            raise ValueError(f"A {role.value} needs a cluster id")

        self._agent_id = agent_id
        self._role = role
        self._cluster_id = cluster_id
        self.position = position or Vector3(0.0, 0.0, 0.0)
        self.velocity = velocity

    @property
    def agent_id(self) -> int:
        return self._agent_id

    @property
    def role(self) -> AgentRole:
        return self._role

    @property
    def cluster_id(self) -> Optional[int]:
        return self._cluster_id

    @property
    def cluster_label(self) -> Optional[str]:
        if self._cluster_id is None:
            return None
        return CLUSTER_LABELS[self._cluster_id]

    def __repr__(self) -> str:
        return (f"Agent(id={self._agent_id}, role={self._role.name}, "
                f"cluster={self.cluster_label}, position={self.position})")


class AgentRegistry:
    """
    Registry of all agents of one run.

    Agent ids follow creation order: the Super-Leader is 0, the
    Cluster-Leaders of clusters A and B are 1 and 2, then the Followers of
    cluster A and finally those of cluster B.
    """

    NUM_CLUSTERS = len(CLUSTER_LABELS)

    def __init__(self):
        self._agents: Dict[int, Agent] = {}
        self._super_leader_id: Optional[int] = None
        self._leader_ids: Dict[int, int] = {}  # cluster_id -> agent_id
        self._follower_ids: Dict[int, List[int]] = {c: [] for c in range(self.NUM_CLUSTERS)}

    @classmethod
    def create(
        cls,
        followers_per_cluster: int,
        super_leader_position: Vector3 = None,
        follower_position: Vector3 = None,
    ) -> AgentRegistry:
        """
        Create the full hierarchy.

        Args:
            followers_per_cluster: Number of followers in each cluster
            super_leader_position: Initial Super-Leader position
            follower_position: Initial position of every follower (origin by default)

        Returns:
            Populated registry
        """
        registry = cls()
        registry.add_agent(AgentRole.SUPER_LEADER, position=super_leader_position)
        for cluster_id in range(cls.NUM_CLUSTERS):
            registry.add_agent(AgentRole.CLUSTER_LEADER, cluster_id)
        for cluster_id in range(cls.NUM_CLUSTERS):
            for _ in range(followers_per_cluster):
                start = follower_position.copy() if follower_position else None
                registry.add_agent(AgentRole.FOLLOWER, cluster_id, position=start)

        logger.debug(
            f"Created hierarchy: 1 super-leader, {cls.NUM_CLUSTERS} cluster-leaders, "
            f"{followers_per_cluster} followers per cluster"
        )
        return registry

    def add_agent(
        self,
        role: AgentRole,
        cluster_id: Optional[int] = None,
        position: Vector3 = None,
    ) -> Agent:
        """Add an agent, enforcing the hierarchy invariants."""
        if cluster_id is not None and not 0 <= cluster_id < self.NUM_CLUSTERS:
            raise ValueError(f"Unknown cluster id: {cluster_id}")

        if role == AgentRole.SUPER_LEADER and self._super_leader_id is not None:
            raise ValueError("A super-leader already exists")
        if role == AgentRole.CLUSTER_LEADER and cluster_id in self._leader_ids:
            raise ValueError(f"Cluster {CLUSTER_LABELS[cluster_id]} already has a leader")
        if role == AgentRole.FOLLOWER and cluster_id not in self._leader_ids:
            raise ValueError(f"Cluster {CLUSTER_LABELS[cluster_id]} has no leader yet")

        agent = Agent(len(self._agents), role, cluster_id, position)
        self._agents[agent.agent_id] = agent

        if role == AgentRole.SUPER_LEADER:
            self._super_leader_id = agent.agent_id
        elif role == AgentRole.CLUSTER_LEADER:
            self._leader_ids[cluster_id] = agent.agent_id
        else:
            self._follower_ids[cluster_id].append(agent.agent_id)

        return agent

    def __len__(self) -> int:
        return len(self._agents)

    def __iter__(self) -> Iterator[Agent]:
        return iter(self._agents.values())

    def get(self, agent_id: int) -> Optional[Agent]:
        """Get agent by ID."""
        return self._agents.get(agent_id)

    @property
    def super_leader(self) -> Agent:
        if self._super_leader_id is None:
            raise LookupError("Registry has no super-leader")
        return self._agents[self._super_leader_id]

    @property
    def cluster_ids(self) -> List[int]:
        return sorted(self._leader_ids)

    def leader_of(self, cluster_id: int) -> Agent:
        """Get the Cluster-Leader of a cluster."""
        return self._agents[self._leader_ids[cluster_id]]

    def cluster_leaders(self) -> List[Agent]:
        return [self.leader_of(c) for c in self.cluster_ids]

    def followers_of(self, cluster_id: int) -> List[Agent]:
        """Get the Followers of a cluster in creation order."""
        return [self._agents[aid] for aid in self._follower_ids[cluster_id]]

    def followers(self) -> List[Agent]:
        return [f for c in self.cluster_ids for f in self.followers_of(c)]

    def set_position(self, agent_id: int, position: Vector3) -> None:
        self._agents[agent_id].position = position

    def positions(self) -> Dict[int, Vector3]:
        """Snapshot of every agent position, keyed by agent id."""
        return {aid: agent.position.copy() for aid, agent in self._agents.items()}

    def clear(self) -> None:
        """Release all agents."""
        self._agents.clear()
        self._super_leader_id = None
        self._leader_ids.clear()
        self._follower_ids = {c: [] for c in range(self.NUM_CLUSTERS)}

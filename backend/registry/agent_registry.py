import json
import math
from collections import defaultdict
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Type

from agents import AGENT_CLASSES, AgentDependencies
from config import logger
from exceptions import RegistryMisconfiguredException
from models.agents import AgentDescriptor, AgentTier
from models.requests import ContentCategory

WEIGHT_TOLERANCE = 1e-6


class AgentRegistry:
    """
    Immutable view of the weight table plus one instance per agent.

    Built once at startup and passed to whatever needs it. Any violation of
    the per-category weight invariant raises RegistryMisconfiguredException
    so the service refuses to start rather than serve a biased ensemble.
    """

    def __init__(
        self,
        table: Mapping[str, Any],
        deps: Optional[AgentDependencies] = None,
        agent_classes: Optional[Mapping[str, Type]] = None
    ):
        agent_classes = AGENT_CLASSES if agent_classes is None else agent_classes
        deps = deps or AgentDependencies()

        self.version = str(table.get("version", "unversioned")) if isinstance(table, Mapping) else "unversioned"
        descriptors = self._parse(table)
        self._validate(descriptors, agent_classes)

        self._descriptors: Mapping[str, AgentDescriptor] = MappingProxyType({d.id: d for d in descriptors})
        by_category = defaultdict(list)
        for descriptor in descriptors:
            for category in ContentCategory:
                if descriptor.applies(category):
                    by_category[category].append(descriptor)
        self._by_category = MappingProxyType({c: tuple(v) for c, v in by_category.items()})
        self._agents = MappingProxyType({d.id: agent_classes[d.id](d.id, deps) for d in descriptors})

        logger.info(
            f"Agent registry {self.version} loaded: "
            + ", ".join(f"{c.value}={len(self._by_category.get(c, ()))}" for c in ContentCategory)
        )

    @classmethod
    def from_file(cls, path: str, deps: Optional[AgentDependencies] = None, agent_classes: Optional[Mapping[str, Type]] = None) -> "AgentRegistry":
        try:
            table = json.loads(Path(path).read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.error(f"Agent weight table not found: {path}")
            raise RegistryMisconfiguredException("weight table not found", path=path)
        except json.JSONDecodeError as e:
            logger.error(f"Agent weight table is not valid JSON: {path}: {e}")
            raise RegistryMisconfiguredException("weight table is not valid JSON", path=path, error=str(e))
        return cls(table, deps=deps, agent_classes=agent_classes)

    def agents_for(self, category: ContentCategory) -> List[AgentDescriptor]:
        """Descriptors of every agent that applies to the category, in table order."""
        return list(self._by_category.get(category, ()))

    def descriptors_for(self, category: ContentCategory) -> Dict[str, AgentDescriptor]:
        return {d.id: d for d in self.agents_for(category)}

    def agent(self, agent_id: str):
        return self._agents[agent_id]

    @property
    def descriptors(self) -> List[AgentDescriptor]:
        return list(self._descriptors.values())

    def weight_sum(self, category: ContentCategory) -> float:
        return math.fsum(d.weight for d in self.agents_for(category))

    @staticmethod
    def _parse(table: Any) -> List[AgentDescriptor]:
        if not isinstance(table, Mapping) or not isinstance(table.get("agents"), list):
            raise RegistryMisconfiguredException("weight table must be an object with an 'agents' list")

        descriptors = []
        for position, entry in enumerate(table["agents"]):
            if not isinstance(entry, Mapping):
                raise RegistryMisconfiguredException("agent entry is not an object", position=position)
            agent_id = entry.get("id")
            if not agent_id or not isinstance(agent_id, str):
                raise RegistryMisconfiguredException("agent entry has no id", position=position)
            try:
                applies_to = frozenset(ContentCategory(c) for c in entry.get("applies_to") or [])
                tier = AgentTier(entry.get("tier", AgentTier.CORE.value))
                weight = float(entry["weight"])
                timeout = float(entry["timeout_seconds"])
            except (KeyError, TypeError, ValueError) as e:
                raise RegistryMisconfiguredException(f"invalid entry for {agent_id}: {e}", agent_id=agent_id)
            descriptors.append(AgentDescriptor(
                id=agent_id,
                weight=weight,
                applies_to=applies_to,
                timeout=timeout,
                tier=tier,
            ))
        return descriptors

    @staticmethod
    def _validate(descriptors: List[AgentDescriptor], agent_classes: Mapping[str, Type]):
        seen = set()
        for d in descriptors:
            if d.id in seen:
                raise RegistryMisconfiguredException(f"duplicate agent id {d.id}", agent_id=d.id)
            seen.add(d.id)
            if d.id not in agent_classes:
                logger.error(f"Weight table names unknown agent {d.id}")
                raise RegistryMisconfiguredException(f"no implementation for agent {d.id}", agent_id=d.id)
            if not 0.0 <= d.weight <= 1.0:
                raise RegistryMisconfiguredException(f"weight of {d.id} outside [0, 1]", agent_id=d.id, weight=d.weight)
            if d.timeout <= 0:
                raise RegistryMisconfiguredException(f"timeout of {d.id} must be positive", agent_id=d.id)
            if not d.applies_to:
                raise RegistryMisconfiguredException(f"{d.id} applies to no category", agent_id=d.id)

        for category in ContentCategory:
            applicable = [d for d in descriptors if d.applies(category)]
            if not applicable:
                continue
            total = math.fsum(d.weight for d in applicable)
            if abs(total - 1.0) > WEIGHT_TOLERANCE:
                logger.error(f"Weights for {category.value} sum to {total:.6f}, expected 1.0")
                raise RegistryMisconfiguredException(
                    f"weights for {category.value} sum to {total:.6f}",
                    category=category.value,
                    weight_sum=total,
                )

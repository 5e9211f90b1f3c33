from .agent_registry import AgentRegistry, WEIGHT_TOLERANCE

__all__ = ["AgentRegistry", "WEIGHT_TOLERANCE"]

from typing import Optional, Dict, Any

class VerificationEngineException(Exception):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }

class RegistryMisconfiguredException(VerificationEngineException):
    """Fatal: the weight table cannot be served. Raised at load/reload only."""
    error_kind = "REGISTRY_MISCONFIGURED"

    def __init__(self, reason: str, **details: Any):
        super().__init__(f"Agent registry misconfigured: {reason}", details)

class AgentException(VerificationEngineException):
    error_kind = "AGENT_INTERNAL_ERROR"

    def __init__(self, agent_id: str, reason: str, **details: Any):
        self.agent_id = agent_id
        self.reason = reason
        super().__init__(
            f"Agent {agent_id} failed: {reason}",
            {"agent_id": agent_id, "reason": reason, **details}
        )

class AgentTimeoutException(AgentException):
    error_kind = "AGENT_TIMEOUT"

class AgentUnavailableException(AgentException):
    error_kind = "AGENT_UNAVAILABLE"

class AgentInvalidResponseException(AgentException):
    error_kind = "AGENT_INVALID_RESPONSE"

class AgentRejectedException(AgentException):
    """Upstream answered 4xx. Never retried."""
    error_kind = "AGENT_REJECTED"

    def __init__(self, agent_id: str, status_code: int):
        self.status_code = status_code
        super().__init__(agent_id, f"upstream rejected request ({status_code})", status_code=status_code)

class AgentNotApplicableException(AgentException):
    """The request lacks the input this agent needs, or its collaborator is unconfigured."""
    error_kind = "AGENT_NOT_APPLICABLE"

class CircuitBreakerOpenException(AgentUnavailableException):
    def __init__(self, service_name: str, failure_count: int):
        super().__init__(
            service_name,
            "circuit breaker open",
            failure_count=failure_count
        )

class CacheUnavailableException(VerificationEngineException):
    def __init__(self, backend: str, reason: str):
        super().__init__(
            f"Cache backend {backend} unavailable: {reason}",
            {"backend": backend, "reason": reason}
        )

class ValidationException(VerificationEngineException, ValueError):
    def __init__(self, field: str, reason: str):
        super().__init__(
            f"Validation failed for {field}: {reason}",
            {"field": field, "reason": reason}
        )

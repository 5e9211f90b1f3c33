import asyncio
from typing import List, Optional

from config import logger
from exceptions import AgentException
from models.agents import AgentDescriptor, AgentResult, ErrorKind
from models.requests import VerificationRequest
from registry import AgentRegistry


class Orchestrator:
    """Fans a request out to every applicable agent and collects one result per agent."""

    def __init__(self, registry: AgentRegistry):
        self.registry = registry

    async def run(
        self,
        request: VerificationRequest,
        descriptors: List[AgentDescriptor],
        request_deadline: Optional[float] = None
    ) -> List[AgentResult]:
        """
        Run all agents concurrently.

        Each agent is cut off at min(its own timeout, the request deadline)
        and its work is cancelled, so the whole call is bounded by the
        slowest agent's timeout. Failures of any kind come back as
        failed AgentResults; nothing raised by an agent escapes.

        Args:
            request: The request handed to every agent
            descriptors: Agents that apply to the request's category
            request_deadline: Optional overall deadline in event-loop time
        Returns:
            One AgentResult per descriptor, in descriptor order
        """
        if not descriptors:
            logger.warning(f"No agents apply to {request.category.value}; nothing to run.")
            return []

        loop = asyncio.get_running_loop()
        started = loop.time()
        tasks = [
            self._run_agent(request, descriptor, request_deadline)
            for descriptor in descriptors
        ]
        results = await asyncio.gather(*tasks)

        failed = [r for r in results if not r.succeeded]
        logger.info(
            f"Orchestrated {len(results)} agents for {request.category.value} "
            f"in {loop.time() - started:.3f}s ({len(failed)} failed)",
            extra={"fingerprint": request.content_fingerprint, "failed": [r.agent_id for r in failed]}
        )
        return list(results)

    async def _run_agent(
        self,
        request: VerificationRequest,
        descriptor: AgentDescriptor,
        request_deadline: Optional[float]
    ) -> AgentResult:
        loop = asyncio.get_running_loop()
        started = loop.time()
        deadline = started + descriptor.timeout
        if request_deadline is not None:
            deadline = min(deadline, request_deadline)
        budget = deadline - started

        if budget <= 0:
            return AgentResult.failure(descriptor.id, ErrorKind.AGENT_TIMEOUT, "request deadline already passed")

        try:
            agent = self.registry.agent(descriptor.id)
            return await asyncio.wait_for(agent.analyze(request, deadline), timeout=budget)
        except asyncio.TimeoutError:
            elapsed = loop.time() - started
            logger.warning(
                f"Agent {descriptor.id} timed out after {elapsed:.3f}s",
                extra={"agent_id": descriptor.id, "error_kind": ErrorKind.AGENT_TIMEOUT.value}
            )
            return AgentResult.failure(descriptor.id, ErrorKind.AGENT_TIMEOUT, f"no result within {budget:.2f}s", elapsed)
        except AgentException as e:
            return AgentResult.failure(descriptor.id, ErrorKind(e.error_kind), e.reason, loop.time() - started)
        except Exception as e:
            logger.exception(f"Agent {descriptor.id} raised unexpectedly")
            return AgentResult.failure(
                descriptor.id,
                ErrorKind.AGENT_INTERNAL_ERROR,
                f"{type(e).__name__}: {e}",
                loop.time() - started,
            )

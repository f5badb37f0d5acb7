"""
subagent.agents

The request lifecycle base class and the bundled reference agent.
"""

from subagent.agents.base import BaseSubAgent, RequestPhase, SubAgent

__all__ = [
    "BaseSubAgent",
    "RequestPhase",
    "SubAgent",
]

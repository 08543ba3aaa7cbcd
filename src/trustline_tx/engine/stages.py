"""
Preparation pipeline execution engine.

A preparation is an ordered list of fallible stages. Each stage reads the
shared context (the call inputs plus the results of earlier stages, keyed by
stage name) and returns its own result. The first failure ends the run; no
partial result is ever returned.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Type

from .exceptions import PreparationError, RelayRequestError

logger = logging.getLogger(__name__)

StageHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class Stage:
    """
    One step of a preparation pipeline.

    Attributes:
        name: Key under which the result is stored in the context.
        description: Gerund phrase used in error messages
            (``"finding a path"`` -> ``"error while finding a path: ..."``).
        handler: Coroutine function taking the context.
        error: Exception class that transport failures of this stage are
            wrapped into.
    """
    name: str
    description: str
    handler: StageHandler
    error: Type[PreparationError] = PreparationError


class PreparationPipeline:
    """Executes stages in order, wrapping failures with the failing stage."""

    def __init__(self, stages: Sequence[Stage], label: Optional[str] = None) -> None:
        """
        Initialize pipeline.

        Args:
            stages: Stages in execution order. Names must be unique.
            label: Name of the pipeline, used in log messages.
        """
        names = [stage.name for stage in stages]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate stage names in pipeline: {names}")
        self.stages = list(stages)
        self.label = label or "pipeline"

    async def execute(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run all stages against ``context``.

        Typed preparation errors raised by a stage propagate unchanged (tagged
        with the stage name if they carry none). Relay transport errors and any
        other exception are re-raised as the stage's ``error`` class with the
        original cause attached. Cancellation is never wrapped.

        Args:
            context: Call inputs. Updated in place with each stage result.

        Returns:
            The context, holding every stage result.
        """
        for stage in self.stages:
            logger.debug(f"{self.label}: {stage.description}")
            try:
                context[stage.name] = await stage.handler(context)
            except RelayRequestError as e:
                raise self._wrap(stage, e) from e
            except PreparationError as e:
                if e.stage is None:
                    e.stage = stage.name
                raise
            except Exception as e:
                raise self._wrap(stage, e) from e
        return context

    @staticmethod
    def _wrap(stage: Stage, cause: Exception) -> PreparationError:
        return stage.error(
            f"error while {stage.description}: {cause}",
            stage=stage.name,
            cause=cause,
        )

"""
Base engine class for all settlement engine components.

Provides common functionality:
- Configuration loading
- Logging and decision tracking
"""

import json
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from pydantic import BaseModel

from fleetledger.core.config import ConfigManager, get_config
from fleetledger.core.logs import get_logger


class EngineDecision(BaseModel):
    """
    Structured record of a computation an engine performed.

    Kept so dispatch can see which inputs produced a number a driver saw.
    """

    timestamp: datetime
    engine_name: str
    decision_type: str
    input_data: dict[str, Any]
    output_data: dict[str, Any]
    summary: str
    execution_time_seconds: float


class BaseEngine(ABC):
    """
    Base class for settlement engine components.

    Provides:
    - Configuration loading
    - Structured logging
    - Decision history
    """

    def __init__(
        self,
        engine_name: str,
        config_manager: Optional[ConfigManager] = None,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        """
        Initialize the base engine.

        Args:
            engine_name: Name of the engine (e.g., "pay_calculator", "cod_evaluator")
            config_manager: Optional config manager (defaults to global instance)
            logger: Optional structured logger
        """
        self.engine_name = engine_name
        self.config_manager = config_manager or get_config()
        self.logger = get_logger(engine_name, logger)

        # Decision history (for audit and debugging)
        self.decision_history: list[EngineDecision] = []
        self._history_lock = threading.Lock()

        self.logger.debug("engine_initialized", engine_name=engine_name)

    def log_decision(self, decision: EngineDecision) -> None:
        """
        Record an engine decision.

        Args:
            decision: EngineDecision instance with decision details
        """
        with self._history_lock:
            self.decision_history.append(decision)
        self.logger.info(
            "engine_decision",
            decision_type=decision.decision_type,
            summary=decision.summary,
            execution_time=decision.execution_time_seconds,
        )

    def record(
        self,
        decision_type: str,
        input_data: dict[str, Any],
        output_data: dict[str, Any],
        summary: str,
        started_at: float,
        finished_at: float,
    ) -> None:
        """Build and log a decision from its parts."""
        self.log_decision(
            EngineDecision(
                timestamp=datetime.now(timezone.utc),
                engine_name=self.engine_name,
                decision_type=decision_type,
                input_data=input_data,
                output_data=output_data,
                summary=summary,
                execution_time_seconds=finished_at - started_at,
            )
        )

    def export_decisions(self, filepath: str) -> None:
        """
        Export decision history to JSON file.

        Args:
            filepath: Path to output JSON file
        """
        with self._history_lock:
            decisions_dict = [d.model_dump(mode="json") for d in self.decision_history]
        with open(filepath, "w") as f:
            json.dump(decisions_dict, f, indent=2, default=str)

        self.logger.info("decisions_exported", filepath=filepath, count=len(decisions_dict))

    @abstractmethod
    def execute(self, *args: Any, **kwargs: Any) -> Any:
        """
        Run the engine's primary computation.

        Returns:
            Engine-specific output
        """
        pass

    def __repr__(self) -> str:
        """String representation of the engine."""
        return f"{self.__class__.__name__}(engine_name='{self.engine_name}')"

#!/usr/bin/env python3
"""Sequential step processor for stack operations."""

import time
from typing import Callable, Dict, List, Any, Optional
from dataclasses import dataclass, field
from webhost_ops.utils.logger import setup_logger


@dataclass
class ProcessingResult:
    """Result of a step processing operation."""

    results: List[Any]
    processed_steps: int
    total_steps: int
    errors: List[str]
    execution_time: float = 0.0
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    success_rate: float = field(init=False)
    metadata: Dict[str, Any] = field(default_factory=dict)
    failed_step: Optional[str] = None

    def __post_init__(self):
        """Calculate success rate after initialization."""
        if self.total_steps > 0:
            self.success_rate = (self.processed_steps / self.total_steps) * 100
        else:
            self.success_rate = 100.0

    @property
    def succeeded(self) -> bool:
        return self.failed_step is None and not self.errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary for serialization."""
        return {
            "processed_steps": self.processed_steps,
            "total_steps": self.total_steps,
            "success_rate": f"{self.success_rate:.2f}%",
            "execution_time": f"{self.execution_time:.2f}s",
            "start_time": self.start_time,
            "end_time": self.end_time,
            "errors_count": len(self.errors),
            "errors": self.errors,
            "failed_step": self.failed_step,
            "metadata": self.metadata,
        }


class StepProcessor:
    """Runs steps in order and halts at the first failure."""

    def __init__(self, name: str = "step_processor"):
        self.name = name
        self.logger = setup_logger(__name__, "step_processor.log")

    def process_steps(
        self,
        steps: List[Any],
        process_function: Callable,
        operation_name: str = "unknown",
        correlation_id: Optional[str] = None,
        step_label: Callable[[Any], str] = str,
    ) -> ProcessingResult:
        """Process steps with the given function, stopping on the first exception.

        Args:
            steps: Ordered steps to process
            process_function: Function executed for each step
            operation_name: Name of the operation for logging
            correlation_id: Correlation ID for tracking operations across logs
            step_label: Turns a step into the label used in logs and errors
        """
        start_time = time.time()
        start_timestamp = time.strftime("%Y-%m-%d %H:%M:%S UTC", time.gmtime(start_time))

        correlation_prefix = f"[{correlation_id}] " if correlation_id else ""
        self.logger.info(
            f"{correlation_prefix}Starting {operation_name} with {len(steps)} steps"
        )

        results = []
        errors = []
        failed_step = None

        for i, step in enumerate(steps, 1):
            label = step_label(step)
            try:
                self.logger.debug(f"{correlation_prefix}Step {i}/{len(steps)}: {label}")
                results.append(process_function(step))
            except Exception as e:
                error_msg = f"Step {label} failed: {e}"
                errors.append(error_msg)
                failed_step = label
                self.logger.error(f"{correlation_prefix}{error_msg}")
                self.logger.error(
                    f"{correlation_prefix}Halting {operation_name}; "
                    f"{len(steps) - i} remaining steps not attempted"
                )
                break

        end_time = time.time()
        end_timestamp = time.strftime("%Y-%m-%d %H:%M:%S UTC", time.gmtime(end_time))
        execution_time = end_time - start_time

        result = ProcessingResult(
            results=results,
            processed_steps=len(results),
            total_steps=len(steps),
            errors=errors,
            execution_time=execution_time,
            start_time=start_timestamp,
            end_time=end_timestamp,
            metadata={"operation_name": operation_name, "processor": self.name},
            failed_step=failed_step,
        )

        self.logger.info(
            f"{correlation_prefix}Completed {operation_name}: "
            f"{result.processed_steps}/{result.total_steps} steps in {execution_time:.2f}s"
        )
        return result

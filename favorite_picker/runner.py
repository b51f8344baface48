"""
Runner for picker sessions.

Feeds batches from a session to a chooser and applies the decisions until the
session is finished, the chooser quits, or the decision budget runs out.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loguru import Logger

from .interfaces import Chooser
from .logging_config import get_logger
from .models import ItemId
from .session import PickerSession

PROGRESS_INTERVAL = 10  # Log progress every 10 decisions


@dataclass
class RunConfig:
    """Configuration for a picker run."""

    max_decisions: int | None = None  # pick/pass decisions allowed, None = until finished
    progress_every: int = PROGRESS_INTERVAL

    def __post_init__(self):
        """Validate configuration."""
        if self.max_decisions is not None and self.max_decisions <= 0:
            raise ValueError(f"max_decisions must be positive, got {self.max_decisions}")
        if self.progress_every <= 0:
            raise ValueError(f"progress_every must be positive, got {self.progress_every}")


@dataclass
class RunSummary:
    """Outcome of a run."""

    decisions: int = 0
    undos: int = 0
    redos: int = 0
    finished: bool = False
    quit: bool = False
    favorites: list[ItemId] = field(default_factory=list)


class PickerRunner:
    """Drives a session with a chooser."""

    def __init__(self, session: PickerSession, chooser: Chooser, config: RunConfig | None = None):
        self.session: PickerSession = session
        self.chooser: Chooser = chooser
        self.config: RunConfig = config or RunConfig()

        # Setup logger
        self.logger: Logger = get_logger("runner")

    def run(self) -> RunSummary:
        """Run until finished, quit, or out of budget."""
        summary = RunSummary()
        self.logger.info(f"Starting picker run with config: {self.config}")

        if not self.session.has_items():
            self.logger.warning("There are no items that fit the current settings")

        while not self.session.is_finished():
            if self.config.max_decisions is not None and summary.decisions >= self.config.max_decisions:
                self.logger.info(f"Decision budget of {self.config.max_decisions} reached")
                break

            batch = self.session.get_evaluating()
            decision = self.chooser.choose(batch, self.session.get_settings())

            if decision.action == "quit":
                summary.quit = True
                self.logger.info("Chooser quit")
                break
            if decision.action == "undo":
                if self.session.undo():
                    summary.undos += 1
                continue
            if decision.action == "redo":
                if self.session.redo():
                    summary.redos += 1
                continue

            if decision.action == "pass":
                self.session.pass_batch()
            else:
                self.session.pick(decision.picked)
            summary.decisions += 1

            if summary.decisions % self.config.progress_every == 0:
                self._log_progress(summary)

        summary.finished = self.session.is_finished()
        summary.favorites = [item.id for item in self.session.get_favorites()]
        self.logger.info(
            f"Run ended after {summary.decisions} decisions: {len(summary.favorites)} favorites, finished={summary.finished}"
        )
        return summary

    def _log_progress(self, summary: RunSummary) -> None:
        engine = self.session.engine
        self.logger.info(
            f"Progress: {summary.decisions} decisions, {len(engine.favorites)}/{len(engine.items)} favorites, "
            + f"{len(engine.current) + len(engine.evaluating)} left this round"
        )


def run_session(session: PickerSession, chooser: Chooser, max_decisions: int | None = None) -> RunSummary:
    """Convenience wrapper around PickerRunner."""
    return PickerRunner(session, chooser, RunConfig(max_decisions=max_decisions)).run()

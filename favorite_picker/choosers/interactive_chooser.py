"""
Interactive chooser implementation.

Shows each batch as a numbered list on the terminal and reads the choice.
"""

import re
from collections.abc import Callable, Sequence

from typing_extensions import override

from ..interfaces import Chooser
from ..logging_config import get_logger
from ..models import Decision, Item, Settings

# Module-level logger
logger = get_logger("interactive_chooser")

COMMANDS = {"p": "pass", "u": "undo", "r": "redo", "q": "quit"}

HELP_TEXT = "Enter the numbers of the items you like (e.g. '1 3'), p to pass, u to undo, r to redo, q to quit."
MUST_SELECT = "You must select something first! If you're indifferent, press p to pass."


class InteractiveChooser(Chooser):
    """Terminal chooser reading selections from an input function."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ):
        """
        Initialize interactive chooser.

        Args:
            input_func: Reads one line given a prompt (default: input)
            output_func: Writes one line (default: print)
        """
        self.input_func = input_func
        self.output_func = output_func

    def _show_batch(self, batch: Sequence[Item]) -> None:
        self.output_func("")
        for number, item in enumerate(batch, 1):
            self.output_func(f"  {number}. {item.display_name}")

    def parse_answer(self, answer: str, batch: Sequence[Item]) -> Decision | None:
        """
        Turn one line of input into a Decision.

        Returns None if the line is not a valid answer for this batch.
        """
        answer = answer.strip().lower()
        if not answer:
            return None
        if answer in COMMANDS:
            return Decision(action=COMMANDS[answer])

        tokens = [token for token in re.split(r"[\s,]+", answer) if token]
        if not all(token.isdigit() for token in tokens):
            return None
        numbers = [int(token) for token in tokens]
        if any(number < 1 or number > len(batch) for number in numbers):
            return None

        picked = list(dict.fromkeys(batch[number - 1].id for number in numbers))
        return Decision(action="pick", picked=picked)

    @override
    def choose(self, batch: Sequence[Item], settings: Settings) -> Decision:
        """Prompt until a valid answer is given; end of input quits."""
        self._show_batch(batch)
        while True:
            try:
                answer = self.input_func("Your pick: ")
            except EOFError:
                logger.debug("Input closed; quitting")
                return Decision(action="quit")

            decision = self.parse_answer(answer, batch)
            if decision is not None:
                return decision
            self.output_func(MUST_SELECT if not answer.strip() else HELP_TEXT)

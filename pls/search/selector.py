"""Interactive selection through the external ``fzf`` program."""

import logging
import subprocess
from typing import List, Optional, Sequence, Tuple

from ..errors import SelectorUnavailable
from .candidates import single_line

logger = logging.getLogger(__name__)

DEFAULT_FZF_ARGS = ["--style=minimal", "--multi", "--cycle"]

# fzf exit codes
EXIT_NO_MATCH = 1
EXIT_INTERRUPTED = 130

FIELD_DELIMITER = "\t"


class FzfSelector:
    """Let the user pick candidates with fzf.

    Each line handed to fzf carries the candidate key in a hidden first
    column, so selections map back to keys even when texts repeat.
    """

    def __init__(self, command: str = "fzf", extra_args: Optional[Sequence[str]] = None):
        self.command = command
        self.extra_args = list(DEFAULT_FZF_ARGS if extra_args is None else extra_args)

    def build_args(self, query: str = "") -> List[str]:
        args = [
            self.command,
            *self.extra_args,
            f"--delimiter={FIELD_DELIMITER}",
            "--with-nth=2..",
        ]
        if query:
            # select every match for the query and return immediately
            args += ["--bind=load:toggle-all+accept", f"--query={query}"]
        return args

    @staticmethod
    def build_input(candidates: Sequence[Tuple[str, str]]) -> str:
        return "\n".join(
            f"{single_line(str(key))}{FIELD_DELIMITER}{single_line(text)}"
            for key, text in candidates
        )

    def select(self, candidates: Sequence[Tuple[str, str]], query: str = "") -> List[str]:
        """Return the keys of the lines the user selected, in fzf's order."""
        if not candidates:
            return []

        args = self.build_args(query)
        logger.debug(f"Running selector: {args}")
        try:
            completed = subprocess.run(
                args,
                input=self.build_input(candidates),
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
            )
        except FileNotFoundError as e:
            raise SelectorUnavailable(f"{self.command} is not installed or not on PATH") from e

        if completed.returncode in (EXIT_NO_MATCH, EXIT_INTERRUPTED):
            return []
        if completed.returncode != 0:
            raise SelectorUnavailable(f"{self.command} exited with status {completed.returncode}")

        keys = []
        for line in completed.stdout.splitlines():
            key, sep, _ = line.partition(FIELD_DELIMITER)
            if sep:
                keys.append(key)
        return keys

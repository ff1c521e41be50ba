"""Command input: each value is the standard output of a shell command."""

from __future__ import annotations

import os
import subprocess

from fuzzwell.models import Config

if os.name == "nt":
    SHELL_CMD = "cmd.exe"
    SHELL_ARG = "/C"
else:
    SHELL_CMD = "/bin/sh"
    SHELL_ARG = "-c"

NUM_ENV_VAR = "FFUF_NUM"


class CommandInput:
    """Runs a command for every position; the position is passed in an environment variable."""

    def __init__(self, keyword: str, command: str, config: Config) -> None:
        self.keyword = keyword
        self.command = command
        self.config = config
        self.active = True
        self.position = 0
        self.shell = config.input_shell or SHELL_CMD

    def has_next(self) -> bool:
        """Tell whether the configured number of inputs has not been reached."""
        return self.position < self.config.input_num

    def value(self) -> bytes:
        """Run the command and return its standard output, or empty bytes on failure."""
        env = {**os.environ, NUM_ENV_VAR: str(self.position)}
        try:
            completed = subprocess.run(
                [self.shell, SHELL_ARG, self.command],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                env=env,
                check=False,
            )
        except OSError:
            return b""
        if completed.returncode != 0:
            return b""
        return completed.stdout

    def increment_position(self) -> None:
        self.position += 1

    def reset_position(self) -> None:
        self.position = 0

    def total(self) -> int:
        """Return the configured number of inputs."""
        return self.config.input_num

    def enable(self) -> None:
        self.active = True

    def disable(self) -> None:
        self.active = False
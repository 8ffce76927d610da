"""A minimal shell that runs pipelines of commands joined by '|'."""

from __future__ import annotations

import subprocess
import sys

MAX_COMMANDS = 201
MAX_ARGS = 65


class PipelineError(Exception):
    """Raised for a command line that cannot be run."""


def strip_quotes(arg):
    """Remove one pair of matching surrounding quotes, if present."""
    if len(arg) >= 2 and arg[0] in "\"'" and arg[-1] == arg[0]:
        return arg[1:-1]
    return arg


def parse_args(text):
    """Split ``text`` into arguments, honouring single and double quotes."""
    args = []
    pos, length = 0, len(text)
    while pos < length:
        while pos < length and text[pos].isspace():
            pos += 1
        if pos >= length:
            break

        chars = []
        quote = None
        while pos < length and (quote is not None or not text[pos].isspace()):
            char = text[pos]
            if quote is None and char in "\"'":
                quote = char
                pos += 1
                continue
            if quote is not None and char == quote:
                quote = None
                pos += 1
                break
            chars.append(char)
            pos += 1

        if quote is not None:
            raise PipelineError("comillas sin cerrar")

        args.append(strip_quotes("".join(chars)))
        if len(args) >= MAX_ARGS:
            raise PipelineError(
                f"se excedió el número máximo de argumentos ({MAX_ARGS})"
            )
    return args


def split_pipeline(line):
    """Split a command line into the commands of its pipeline."""
    if not line:
        return []
    if line.startswith("|") or line.endswith("|"):
        raise PipelineError("comando no puede comenzar ni terminar con '|'")
    if "||" in line:
        raise PipelineError("uso inválido de '||'")

    commands = []
    for segment in line.split("|"):
        if not segment:
            continue
        segment = segment.lstrip(" ")
        if not segment:
            raise PipelineError("comando vacío entre pipes")
        commands.append(segment)

    if len(commands) >= MAX_COMMANDS:
        raise PipelineError(
            "se excedió el número máximo de comandos encadenados "
            f"({MAX_COMMANDS - 1})"
        )
    return commands


def run_pipeline(commands):
    """Run ``commands`` connected stdout-to-stdin; return their exit codes."""
    stages = []
    upstream = None
    last = len(commands) - 1
    for index, command in enumerate(commands):
        if index == 0:
            stdin = None
        elif upstream is None:
            stdin = subprocess.DEVNULL
        else:
            stdin = upstream
        stdout = None if index == last else subprocess.PIPE

        process = None
        try:
            argv = parse_args(command)
            if not argv:
                raise PipelineError("comando vacío")
            process = subprocess.Popen(argv, stdin=stdin, stdout=stdout)
        except PipelineError as exc:
            sys.stderr.write(f"Error: {exc}\n")
        except OSError as exc:
            reason = exc.strerror or str(exc)
            sys.stderr.write(f"Error ejecutando comando '{argv[0]}': {reason}\n")
        finally:
            if upstream is not None:
                upstream.close()

        stages.append(process)
        upstream = process.stdout if process is not None and stdout is not None else None

    return [1 if process is None else process.wait() for process in stages]


def main(argv=None):
    """Read command lines from standard input and run them until 'exit'."""
    while True:
        if sys.stdin.isatty():
            sys.stdout.write("Shell> ")
            sys.stdout.flush()

        line = sys.stdin.readline()
        if not line:
            break
        command = line.split("\n", 1)[0]
        if command == "exit":
            break

        try:
            commands = split_pipeline(command)
        except PipelineError as exc:
            sys.stderr.write(f"Error: {exc}\n")
            continue
        if commands:
            sys.stdout.flush()
            run_pipeline(commands)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
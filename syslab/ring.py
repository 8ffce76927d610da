"""Pass a value around a ring of processes, each adding one to it."""

from __future__ import annotations

import multiprocessing
import re
import sys

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text):
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _ring_member(inbox, outbox):
    value = inbox.recv()
    outbox.send(value + 1)
    inbox.close()
    outbox.close()


def run_ring(n, value, start):
    """Send ``value`` into a ring of ``n`` processes starting at ``start``.

    Every process increments the value once before passing it on; the process
    just before ``start`` hands the result back, which is returned.
    """
    if start < 0 or start >= n:
        raise ValueError("start must lie between 0 and n-1")

    pipes = [multiprocessing.Pipe(duplex=False) for _ in range(n)]
    parent_recv, parent_send = multiprocessing.Pipe(duplex=False)

    members = []
    for index in range(n):
        following = (index + 1) % n
        outbox = parent_send if following == start else pipes[following][1]
        member = multiprocessing.Process(
            target=_ring_member, args=(pipes[index][0], outbox), daemon=True
        )
        member.start()
        members.append(member)

    # Drop the parent's copies of every end it does not use, so a dead ring
    # shows up as end-of-file instead of a hang.
    for index, (recv_end, send_end) in enumerate(pipes):
        recv_end.close()
        if index != start:
            send_end.close()
    parent_send.close()

    entry = pipes[start][1]
    try:
        entry.send(value)
        entry.close()
        try:
            result = parent_recv.recv()
        except EOFError as exc:
            raise RuntimeError("the ring ended without returning a value") from exc
    finally:
        parent_recv.close()
        for member in members:
            member.join()
    return result


def main(argv=None):
    """Run the ring from the command line; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 3:
        print("Uso: anillo <n> <c> <s> ")
        return 0

    n, value, start = (_atoi(arg) for arg in args)
    if start < 0 or start >= n:
        sys.stderr.write(
            "Start (el tercer input) debe estar entre 0 y n-1 (el primer input)\n"
        )
        return 1

    print(f"Se crearán {n} procesos, se enviará el valor {value} desde proceso {start} ")
    result = run_ring(n, value, start)
    print(f"Valor final recibido en el padre: {result}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
"""An instruction-level simulator shell for a 64-bit ARM machine.

The shell owns memory, the architectural state and the interactive command
loop. The work of decoding and executing one instruction is delegated to a
``process_instruction`` callable, which reads the current state and writes
the next one.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field

ARM_REGS = 32

MEM_DATA_START = 0x10000000
MEM_DATA_SIZE = 0x00100000
MEM_TEXT_START = 0x00400000
MEM_TEXT_SIZE = 0x00100000
MEM_STACK_START = 0xFFFFFFFC
MEM_STACK_SIZE = 0x00100000

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF

_HEX_WORD = re.compile(r"[+-]?(?:0[xX](?=[0-9a-fA-F]))?[0-9a-fA-F]+")
_C_INT = re.compile(r"([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")
_DECIMAL = re.compile(r"[+-]?[0-9]+")

_HELP = (
    "----------------ARM ISIM Help-----------------------\n"
    "go               -  run program to completion         \n"
    "run n            -  execute program for n instructions\n"
    "mdump low high   -  dump memory from low to high      \n"
    "rdump            -  dump the register & bus values    \n"
    "input reg_no reg_value - set GPR reg_no to reg_value  \n"
    "?                -  display this help menu            \n"
    "quit             -  exit the program                  \n\n"
)


class ProgramLoadError(Exception):
    """Raised when a program file cannot be opened or parsed."""


def _to_int64(value):
    value &= _MASK64
    return value - (1 << 64) if value >= (1 << 63) else value


def _to_int32(value):
    value &= _MASK32
    return value - (1 << 32) if value >= (1 << 31) else value


def _parse_c_int(token):
    """Parse an integer the way scanf's %i does (hex, octal or decimal)."""
    match = _C_INT.match(token)
    if match is None:
        return None
    sign, digits = match.groups()
    if digits[:2] in ("0x", "0X"):
        value = int(digits[2:], 16)
    elif digits.startswith("0"):
        value = int(digits, 8)
    else:
        value = int(digits)
    return -value if sign == "-" else value


def _parse_decimal(token):
    match = _DECIMAL.match(token)
    return int(match.group()) if match else None


def _parse_hex(token):
    match = _HEX_WORD.match(token)
    return int(match.group(), 16) if match else None


@dataclass
class CPUState:
    """Program counter, register file and condition flags."""

    pc: int = 0
    regs: list = field(default_factory=lambda: [0] * ARM_REGS)
    flag_n: int = 0
    flag_z: int = 0

    def copy(self):
        return CPUState(self.pc, list(self.regs), self.flag_n, self.flag_z)


@dataclass
class _Region:
    start: int
    size: int
    data: bytearray

    def offset(self, address):
        if self.start <= address < self.start + self.size:
            return (address - self.start) & _MASK32
        return None


class Memory:
    """Text, data and stack regions, addressed with little-endian 32-bit words."""

    def __init__(self):
        # Three spare bytes per region allow an unaligned word at the very end.
        self.regions = [
            _Region(start, size, bytearray(size + 3))
            for start, size in (
                (MEM_TEXT_START, MEM_TEXT_SIZE),
                (MEM_DATA_START, MEM_DATA_SIZE),
                (MEM_STACK_START, MEM_STACK_SIZE),
            )
        ]

    def _locate(self, address):
        address &= _MASK64
        for region in self.regions:
            offset = region.offset(address)
            if offset is not None:
                return region, offset
        return None, None

    def read_32(self, address):
        """Return the word at ``address``; unmapped addresses read as zero."""
        region, offset = self._locate(address)
        if region is None:
            return 0
        return int.from_bytes(region.data[offset:offset + 4], "little")

    def write_32(self, address, value):
        """Store a word at ``address``; writes to unmapped addresses are dropped."""
        region, offset = self._locate(address)
        if region is None:
            return
        region.data[offset:offset + 4] = (value & _MASK32).to_bytes(4, "little")


def process_instruction(current, next_state, memory):
    """Execute one instruction.

    Reads ``current``, writes ``next_state`` and may use ``memory``.
    Returning ``False`` halts the simulator. This default decodes nothing:
    it carries the current state into the next one unchanged.
    """
    next_state.pc = current.pc
    next_state.regs[:] = current.regs
    next_state.flag_n = current.flag_n
    next_state.flag_z = current.flag_z
    return True


class Simulator:
    """The machine: memory, current and next state, and the run bit."""

    def __init__(self, out=None, process_instruction=process_instruction):
        self.out = sys.stdout if out is None else out
        self.process_instruction = process_instruction
        self.memory = Memory()
        self.current = CPUState()
        self.next_state = CPUState()
        self.run_bit = True
        self.instruction_count = 0

    def _emit(self, text, dump_file=None):
        self.out.write(text)
        if dump_file is not None:
            dump_file.write(text)

    def load_program(self, path):
        """Load hexadecimal words from ``path`` into the text region.

        Returns the number of words read and points the PC at the text start.
        """
        try:
            with open(path, encoding="latin-1") as program:
                text = program.read()
        except OSError as exc:
            raise ProgramLoadError(f"Error: Can't open program file {path}") from exc

        words = []
        pos = 0
        while True:
            while pos < len(text) and text[pos].isspace():
                pos += 1
            if pos >= len(text):
                break
            match = _HEX_WORD.match(text, pos)
            if match is None:
                raise ProgramLoadError(f"Error: Malformed program file {path}")
            words.append(int(match.group(), 16) & _MASK32)
            pos = match.end()

        for index, word in enumerate(words):
            self.memory.write_32(MEM_TEXT_START + 4 * index, word)
        self.current.pc = MEM_TEXT_START
        self.next_state = self.current.copy()
        self.run_bit = True
        self._emit(f"Read {len(words)} words from program into memory.\n\n")
        return len(words)

    def cycle(self):
        """Execute one instruction and latch the next state."""
        if self.process_instruction(self.current, self.next_state, self.memory) is False:
            self.run_bit = False
        self.current = self.next_state.copy()
        self.instruction_count += 1

    def run(self, num_cycles):
        """Simulate for at most ``num_cycles`` instructions."""
        if not self.run_bit:
            self._emit("Can't simulate, Simulator is halted\n\n")
            return
        self._emit(f"Simulating for {num_cycles} cycles...\n\n")
        for _ in range(num_cycles):
            if not self.run_bit:
                self._emit("Simulator halted\n\n")
                break
            self.cycle()

    def go(self):
        """Simulate until the program halts."""
        if not self.run_bit:
            self._emit("Can't simulate, Simulator is halted\n\n")
            return
        self._emit("Simulating...\n\n")
        while self.run_bit:
            self.cycle()
        self._emit("Simulator halted\n\n")

    def mdump(self, dump_file, start, stop):
        """Dump the words from ``start`` to ``stop`` to the output and ``dump_file``."""
        lines = [
            f"\nMemory content [0x{start & _MASK32:08x}..0x{stop & _MASK32:08x}] :\n",
            "-------------------------------------\n",
        ]
        for address in range(start, stop + 1, 4):
            lines.append(
                f"  0x{address & _MASK32:08x} ({_to_int32(address)}) : "
                f"0x{self.memory.read_32(address):x}\n"
            )
        lines.append("\n")
        text = "".join(lines)
        self._emit(text)
        dump_file.write(text)

    def rdump(self, dump_file):
        """Dump the registers and flags to the output and ``dump_file``."""
        lines = [
            "\nCurrent register/bus values :\n",
            "-------------------------------------\n",
            f"Instruction Count : {self.instruction_count & _MASK32}\n",
            f"PC                : 0x{self.current.pc & _MASK64:x}\n",
            "Registers:\n",
        ]
        lines.extend(
            f"X{index}: 0x{value & _MASK64:x}\n"
            for index, value in enumerate(self.current.regs)
        )
        lines.append(f"FLAG_N: {self.current.flag_n}\n")
        lines.append(f"FLAG_Z: {self.current.flag_z}\n")
        lines.append("\n")
        text = "".join(lines)
        self._emit(text)
        dump_file.write(text)

    def help(self):
        self._emit(_HELP)

    def handle_command(self, line, dump_file):
        """Carry out one shell command; return False when the shell should quit."""
        tokens = line.split()
        if not tokens:
            return True
        command, args = tokens[0], tokens[1:]
        self._emit("\n")

        key = command[0].lower()
        if key == "g":
            self.go()
        elif key == "m":
            if len(args) >= 2:
                start, stop = _parse_c_int(args[0]), _parse_c_int(args[1])
                if start is not None and stop is not None:
                    self.mdump(dump_file, start, stop)
        elif key == "?":
            self.help()
        elif key == "q":
            self._emit("Bye.\n")
            return False
        elif key == "r":
            if command[1:2] in ("d", "D"):
                self.rdump(dump_file)
            elif args:
                cycles = _parse_decimal(args[0])
                if cycles is not None:
                    self.run(cycles)
        elif key == "i":
            if len(args) >= 2:
                register_no = _parse_c_int(args[0])
                value = _parse_hex(args[1])
                if register_no is not None and value is not None and 0 <= register_no < ARM_REGS:
                    value = _to_int64(value)
                    self.current.regs[register_no] = value
                    self.next_state.regs[register_no] = value
        else:
            self._emit("Invalid Command\n")
        return True


def main(argv=None):
    """Load the program files and run the interactive shell; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Error: usage: armsim <program_file_1> <program_file_2> ...")
        return 1

    sys.stdout.write("ARM Simulator\n\n")
    sim = Simulator(sys.stdout)
    try:
        for path in args:
            sim.load_program(path)
    except ProgramLoadError as exc:
        print(exc)
        return 255

    try:
        dump_file = open("dumpsim", "w", encoding="utf-8")
    except OSError:
        print("Error: Can't open dumpsim file")
        return 255

    with dump_file:
        while True:
            sys.stdout.write("ARM-SIM> ")
            sys.stdout.flush()
            line = sys.stdin.readline()
            if not line:
                return 0
            if not line.strip():
                continue
            if not sim.handle_command(line, dump_file):
                return 0


if __name__ == "__main__":
    raise SystemExit(main())
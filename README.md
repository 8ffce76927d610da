# syslab

Small systems tools in pure Python:

- a reader for Unix Version 6 disk images: inodes, file blocks, directories,
  path lookup and SHA-1 checksums of files (`syslab.diskimg`,
  `syslab.layout`, `syslab.v6fs`, `syslab.checksum`, `syslab.diskimageaccess`);
- a ring of processes that passes a value around, each adding one
  (`syslab.ring`);
- a small interactive shell that runs `|` pipelines (`syslab.pipeshell`);
- a doubly linked list of typed strings that concatenates by type
  (`syslab.strproc`);
- the command shell of an instruction-level ARM simulator (`syslab.armsim`).

There are no runtime dependencies beyond the standard library.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Reading a V6 disk image

```
diskimageaccess [-q] [-i] [-p] diskimagePath
```

- `-q` leaves out the disk size and superblock summary
- `-i` prints the checksum of every allocated inode
- `-p` walks the directory tree from `/` and prints the checksum of every path

Output lines have these shapes:

```
Inode <inumber> mode 0x<mode> size <bytes> checksum <40 hex digits>
Path <pathname> <inumber> mode 0x<mode> size <bytes> checksum <40 hex digits>
```

Problems with single inodes or paths are reported on standard error and the
walk goes on. A wrong option or a missing image path prints the usage and
exits with status 1.

From Python:

```python
from syslab.diskimg import DiskImage
from syslab.v6fs import UnixFilesystem, FilesystemError
from syslab.checksum import checksum_by_pathname, checksum_to_string

with DiskImage("disk.img", True) as disk:
    fs = UnixFilesystem(disk)
    inumber = fs.lookup("/usr/bin")
    for entry in fs.dir_entries(inumber, 10000):
        print(entry.name, entry.inumber)
    print(checksum_to_string(checksum_by_pathname(fs, "/etc/passwd")))
```

- `DiskImage(path, read_only)` gives `size()`, `read_sector(n)`,
  `write_sector(n, data)` (exactly 512 bytes) and `close()`, and works as a
  context manager.
- `syslab.layout` holds `Superblock`, `Inode` and `DirEntry`, each built with
  `from_bytes`; `Inode` has `size()`, `is_allocated()`, `is_directory()` and
  `is_large()`, and `DirEntry` has `to_bytes()`.
- `UnixFilesystem(disk)` checks the boot block magic number and reads the
  superblock. Its `inode`, `block_address`, `read_block`, `find_name`,
  `lookup` and `dir_entries` raise `FilesystemError` when an inode number is
  out of range, a block is not mapped, a name is missing, a path is not
  absolute or an inode is not a directory. Small, indirect and
  double-indirect block addressing are all handled.
- `syslab.checksum` has `checksum_by_inumber`, `checksum_by_pathname`,
  `checksum_to_string` and `checksums_equal`.
- `syslab.diskimageaccess` also has `dump_inode_checksums`,
  `dump_pathname_checksums` and `print_directory`, each writing to the
  `out` and `err` streams it is given.

## The process ring

```
syslab-ring <n> <c> <s>
```

Starts `n` processes joined in a ring by pipes, hands the value `c` to process
`s`, and each process adds one before passing it on. The parent prints the
value that comes back after a full turn. `s` must lie between `0` and `n-1`;
otherwise the command exits with status 1. With the wrong number of arguments
it prints the usage line and exits with status 0.

`syslab.ring.run_ring(n, value, start)` does the same and returns the final
value; it raises `ValueError` for a `start` outside the ring.

## The pipeline shell

```
syslab-shell
```

Reads command lines from standard input and runs them, connecting commands
joined by `|`. Single and double quotes group words into one argument. Lines
that start or end with `|`, contain `||` or have an empty command between
pipes are rejected with a message; `exit` or end of input leaves the shell.
The prompt `Shell> ` is shown only when standard input is a terminal.

The pieces are in `syslab.pipeshell`:

- `strip_quotes(arg)` removes one pair of matching surrounding quotes;
- `parse_args(text)` splits a command into arguments and raises
  `PipelineError` on an unclosed quote or more than 64 arguments;
- `split_pipeline(line)` splits a line into commands and raises
  `PipelineError` for the malformed lines above or more than 200 commands;
- `run_pipeline(commands)` runs the commands and returns their exit codes,
  with 1 for a command that could not be started.

## The string list

```python
from syslab.strproc import StringProcList

items = StringProcList()
items.add_node(0, "hola")
items.add_node(1, "x")
items.add_node(0, "todos!")
items.concat(0, "hash")   # "hashholatodos!"
len(items)                # 3
```

Node types must lie between 0 and 255, or `ValueError` is raised. The list is
iterable over its `StringProcNode` items, and `print_to(file)` writes the list
length followed by one line per node. `str_concat(first, second)` joins two
strings.

## The ARM simulator shell

```
syslab-armsim program.x [more.x ...]
```

Loads hexadecimal instruction words into text memory at `0x00400000` and
opens the `ARM-SIM> ` prompt with the commands `go`, `run n`,
`mdump low high`, `rdump`, `input reg_no reg_value`, `?` and `quit`. Only the
first letter of a command counts (and the second, to tell `rdump` from
`run`). Dumps also go to a `dumpsim` file in the working directory. A program
file that cannot be opened or parsed ends the command with status 255.

`Simulator(out, process_instruction)` holds the `Memory` (text, data and stack
regions read and written as little-endian 32-bit words), the current and next
`CPUState`, and the run bit. Its step function is called as
`process_instruction(current, next_state, memory)`; returning `False` halts
the machine.

## What it does not do

The ARM simulator does not decode or execute any instructions. The default
`syslab.armsim.process_instruction` only carries the current state into the
next one and never halts, so `go` with it runs forever; use `run n`, or give
`Simulator` a step function of your own that executes instructions and
returns `False` when the program ends.

The disk image reader only reads: it does not allocate inodes or blocks,
create files or change directories. `diskimageaccess` has no option for
listing a directory; use `print_directory` from Python for that.
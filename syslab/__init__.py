"""Systems toolkit: a V6 disk image reader, a process ring, a pipeline shell, a typed string list and an ARM simulator shell."""

__version__ = "0.1.0"
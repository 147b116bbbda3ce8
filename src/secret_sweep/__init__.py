"""Secret Sweep - branch-aware secret scanning for filesystems and Git repositories."""

__version__ = "0.1.0"

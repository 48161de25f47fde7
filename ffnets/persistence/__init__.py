"""Binary persistence of networks."""

from .file_format import MAGIC, read, read_network, write, write_network
from .stream import DataInput, DataOutput

__all__ = [
    "DataInput",
    "DataOutput",
    "MAGIC",
    "read",
    "read_network",
    "write",
    "write_network",
]

"""Series derivation from accumulated search hits."""

from .demux import demultiplex
from .timestamps import TimestampFormatError, parse_timestamp

__all__ = ["TimestampFormatError", "demultiplex", "parse_timestamp"]

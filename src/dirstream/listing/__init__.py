"""Directory listing model and HTML index parser."""

from dirstream.listing.models import Entry, EntryType
from dirstream.listing.parser import parse_listing

__all__ = ["Entry", "EntryType", "parse_listing"]

"""HTTP access to the upstream index server."""

from dirstream.upstream.fetcher import UpstreamFetcher, translate_errors

__all__ = ["UpstreamFetcher", "translate_errors"]

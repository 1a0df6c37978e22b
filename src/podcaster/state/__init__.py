"""Download state persistence for podcaster."""

from podcaster.state.store import DownloadRecord, StateStore, merge_records

__all__ = ["DownloadRecord", "StateStore", "merge_records"]

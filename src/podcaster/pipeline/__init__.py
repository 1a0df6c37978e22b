"""Feed-to-download pipeline.

Planning, per-podcast orchestration and the fleet runner that ties them to
the persisted download state.
"""

from podcaster.pipeline.models import EpisodeFailure, FeedListing, FleetReport, RunResult
from podcaster.pipeline.orchestrator import PodcastOrchestrator
from podcaster.pipeline.planner import episode_identifier, plan_episodes, should_download
from podcaster.pipeline.reporter import Reporter
from podcaster.pipeline.runner import FleetRunner

__all__ = [
    "EpisodeFailure",
    "FeedListing",
    "FleetReport",
    "FleetRunner",
    "PodcastOrchestrator",
    "Reporter",
    "RunResult",
    "episode_identifier",
    "plan_episodes",
    "should_download",
]

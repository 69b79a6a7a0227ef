"""Discovery pipeline: random id sampling, paced fetching and batch submission."""

from .fetcher import FetchError, FetchState, TralbumFetcher, parse_retry_after
from .sampler import Sampler, SamplerStats
from .submitter import SubmissionError, Submitter

__all__ = [
    "FetchError",
    "FetchState",
    "TralbumFetcher",
    "parse_retry_after",
    "Sampler",
    "SamplerStats",
    "SubmissionError",
    "Submitter",
]

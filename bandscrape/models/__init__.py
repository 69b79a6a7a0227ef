from .dto import StoredTrackDTO, TrackDTO

__all__ = ["TrackDTO", "StoredTrackDTO"]

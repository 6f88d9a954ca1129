from .player_window import PlayerWindow, PlaybackClock

__all__ = ["PlayerWindow", "PlaybackClock"]

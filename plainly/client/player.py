"""
Single owned audio player for recording playback.

``AudioPlayer`` holds the playback state (active recording, speed) and
drives a :class:`BasePlaybackDevice`, the platform audio backend. There is
exactly one player per client and it is mutated from one task only.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

SPEED_OPTIONS: tuple[float, ...] = (1.0, 1.5, 2.0, 0.5)

# Positions within this many seconds of the end count as finished
END_TOLERANCE_SEC = 0.1


class BasePlaybackDevice(ABC):
    """Abstract platform audio backend."""

    @abstractmethod
    def replace(self, uri: str) -> None:
        """Load *uri* as the current source, stopping any previous one."""

    @abstractmethod
    def play(self) -> None: ...

    @abstractmethod
    def pause(self) -> None: ...

    @abstractmethod
    def seek_to(self, seconds: float) -> None: ...

    @abstractmethod
    def set_playback_rate(self, rate: float) -> None: ...

    @abstractmethod
    def unload(self) -> None:
        """Release the current source."""

    @property
    @abstractmethod
    def playing(self) -> bool: ...

    @property
    @abstractmethod
    def current_time(self) -> float: ...

    @property
    @abstractmethod
    def duration(self) -> float:
        """Source duration in seconds, or 0 when not yet known."""


class AudioPlayer:
    """Play/pause, seek and speed control for one recording at a time.

    Args:
        device: Platform playback backend.
    """

    def __init__(self, device: BasePlaybackDevice) -> None:
        self._device = device
        self.active_recording_id: str | None = None
        self.audio_uri: str | None = None
        self.playback_speed: float = SPEED_OPTIONS[0]
        self._fallback_duration: float = 0.0

    @property
    def is_playing(self) -> bool:
        return self.active_recording_id is not None and self._device.playing

    @property
    def position(self) -> float:
        return self._device.current_time if self.active_recording_id else 0.0

    @property
    def duration(self) -> float:
        """Device-reported duration, else the stored recording duration."""
        reported = self._device.duration
        return reported if reported > 0 else self._fallback_duration

    def is_active(self, recording_id: str) -> bool:
        return self.active_recording_id == recording_id

    def load_and_play(self, recording_id: str, audio_uri: str, duration_sec: float = 0.0) -> None:
        """Start playback of a recording, or toggle it if it is already loaded.

        Loading a different recording replaces the source and resets the
        speed to 1x.
        """
        if self.is_active(recording_id):
            self.toggle_playback()
            return

        logger.debug("Loading recording %s for playback", recording_id)
        self._device.replace(audio_uri)
        self.active_recording_id = recording_id
        self.audio_uri = audio_uri
        self._fallback_duration = duration_sec
        self.playback_speed = SPEED_OPTIONS[0]
        self._device.set_playback_rate(self.playback_speed)
        self._device.play()

    def toggle_playback(self) -> None:
        if self.active_recording_id is None:
            return
        if self._device.playing:
            self._device.pause()
            return
        total = self.duration
        if total > 0 and self._device.current_time >= total - END_TOLERANCE_SEC:
            self._device.seek_to(0.0)
        self._device.play()

    def seek_to(self, seconds: float) -> None:
        """Seek within the active source, clamped to ``[0, duration]``."""
        if self.active_recording_id is None:
            return
        self._device.seek_to(max(0.0, min(seconds, self.duration)))

    def cycle_speed(self) -> float:
        """Advance to the next speed in ``SPEED_OPTIONS`` and return it."""
        try:
            index = SPEED_OPTIONS.index(self.playback_speed)
        except ValueError:
            index = -1
        self.playback_speed = SPEED_OPTIONS[(index + 1) % len(SPEED_OPTIONS)]
        if self.active_recording_id is not None:
            self._device.set_playback_rate(self.playback_speed)
        return self.playback_speed

    def on_finished(self) -> None:
        """Device callback: the source ended; rewind so the next play starts over."""
        if self.active_recording_id is not None:
            self._device.seek_to(0.0)

    def close(self) -> None:
        """Pause, unload and reset to the idle state."""
        if self.active_recording_id is None:
            return
        self._device.pause()
        self._device.unload()
        logger.debug("Closed playback of recording %s", self.active_recording_id)
        self.active_recording_id = None
        self.audio_uri = None
        self._fallback_duration = 0.0
        self.playback_speed = SPEED_OPTIONS[0]

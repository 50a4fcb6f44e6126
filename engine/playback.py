"""
engine/playback.py — Navigation, audio and gallery decisions for the embedded runtime.

Every decision is computed here as a lookup table; the exported document
only indexes into these tables, so the rules can be tested without a browser.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

from models import Project, ScreenConfig

AudioSource = Literal["global", "screen", "extended", "none"]
AudioAction = Literal["play", "continue", "stop", "none"]


# ── Navigation ──────────────────────────────────────────────


@dataclass(frozen=True)
class NavigationModel:
    """Linear screen sequence; movement is clamped at the first/last screen."""

    screen_ids: List[str]

    @property
    def count(self) -> int:
        return len(self.screen_ids)

    def can_go_next(self, index: int) -> bool:
        return 0 <= index < self.count - 1

    def can_go_previous(self, index: int) -> bool:
        return 0 < index < self.count

    def table(self) -> List[Dict[str, object]]:
        """Per-screen neighbours; None disables the button and the move."""
        rows: List[Dict[str, object]] = []
        for i, screen_id in enumerate(self.screen_ids):
            rows.append({
                "id": screen_id,
                "prev": i - 1 if self.can_go_previous(i) else None,
                "next": i + 1 if self.can_go_next(i) else None,
            })
        return rows


# ── Audio ───────────────────────────────────────────────────


@dataclass(frozen=True)
class AudioCue:
    screen_id: str
    track_id: Optional[str]
    source: AudioSource

    def to_config(self) -> Dict[str, object]:
        return {"screen": self.screen_id, "track": self.track_id, "source": self.source}


@dataclass
class AudioPlan:
    """Which track should be audible on each screen.

    A global track wins everywhere and keeps playing across navigation.
    Otherwise a screen plays its own track; a screen without one inherits
    the previous screen's own track when that screen asked to extend its
    music, for exactly one transition.
    """

    cues: List[AudioCue] = field(default_factory=list)
    global_track_id: Optional[str] = None

    @classmethod
    def build(cls, project: Project, screens: List[ScreenConfig]) -> AudioPlan:
        audio = project.data.audio
        if audio.global_track is not None:
            cues = [AudioCue(s.screen_id, audio.global_track.id, "global") for s in screens]
            return cls(cues=cues, global_track_id=audio.global_track.id)

        cues: List[AudioCue] = []
        previous: Optional[ScreenConfig] = None
        for screen in screens:
            own = audio.screens.get(screen.screen_id)
            if own is not None:
                cues.append(AudioCue(screen.screen_id, own.id, "screen"))
            elif previous is not None and cls._extends(project, previous):
                cues.append(AudioCue(screen.screen_id, audio.screens[previous.screen_id].id, "extended"))
            else:
                cues.append(AudioCue(screen.screen_id, None, "none"))
            previous = screen
        return cls(cues=cues)

    @staticmethod
    def _extends(project: Project, screen: ScreenConfig) -> bool:
        has_track = screen.screen_id in project.data.audio.screens
        return has_track and project.data.screen(screen.screen_id).extend_music_to_next

    def track_for(self, index: int) -> Optional[str]:
        if 0 <= index < len(self.cues):
            return self.cues[index].track_id
        return None

    def action_on_enter(self, current_track: Optional[str], index: int) -> AudioAction:
        """What the single-voice audio manager does when a screen becomes active."""
        wanted = self.track_for(index)
        if wanted is None:
            return "stop" if current_track else "none"
        if wanted == current_track:
            return "continue"
        return "play"

    def enter_table(self) -> List[Dict[str, Optional[AudioAction]]]:
        """Action per screen for each way of arriving there.

        `fresh` is used when nothing is playing (start, unmute, direct
        playForScreen); `fromPrev` / `fromNext` when arriving by next() or
        previous(), which left the neighbour's track playing. A move that
        navigation never allows is None.
        """
        last = len(self.cues) - 1
        rows: List[Dict[str, Optional[AudioAction]]] = []
        for i in range(len(self.cues)):
            rows.append({
                "fresh": self.action_on_enter(None, i),
                "fromPrev": self.action_on_enter(self.track_for(i - 1), i) if i > 0 else None,
                "fromNext": self.action_on_enter(self.track_for(i + 1), i) if i < last else None,
            })
        return rows

    def track_ids(self) -> List[str]:
        ids: List[str] = []
        for cue in self.cues:
            if cue.track_id and cue.track_id not in ids:
                ids.append(cue.track_id)
        return ids

    def to_config(self) -> List[Dict[str, object]]:
        return [cue.to_config() for cue in self.cues]


# ── Galleries ───────────────────────────────────────────────


@dataclass(frozen=True)
class GallerySteps:
    """Wrap-around moves and counter labels for a gallery of `count` images."""

    count: int

    def next(self) -> List[int]:
        return [(i + 1) % self.count for i in range(self.count)]

    def prev(self) -> List[int]:
        return [(i - 1) % self.count for i in range(self.count)]

    def labels(self) -> List[str]:
        return [f"{i + 1} / {self.count}" for i in range(self.count)]

    def to_config(self) -> Dict[str, List[object]]:
        return {"next": self.next(), "prev": self.prev(), "labels": self.labels()}

"""In-memory representation of a playable chart."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction


class PlayMode(Enum):
    """Key layout of a chart."""

    BMS_7KEY = "Bms7Key"  # scratch + 7 keys
    PMS_9KEY = "Pms9Key"  # 9 keys
    DP_14KEY = "Dp14Key"  # two sides of scratch + 7 keys


class BgaLayer(Enum):
    """Layer a background image is shown on."""

    BASE = "Base"
    POOR = "Poor"
    OVERLAY = "Overlay"


class LnType(Enum):
    """How long notes are judged."""

    LN = "Ln"
    CN = "Cn"
    HCN = "Hcn"


class NoteType(Enum):
    """Kind of a playable object."""

    NORMAL = "Normal"
    LONG_START = "LongStart"
    LONG_END = "LongEnd"
    INVISIBLE = "Invisible"
    LANDMINE = "Landmine"


LANE_COUNT_BMS = 8
LANE_COUNT_PMS = 9
LANE_COUNT_DP = 16
MAX_LANE_COUNT = 16
LANE_COUNT = LANE_COUNT_BMS


class NoteChannel(Enum):
    """Lane a note is placed on; the value is its lane index."""

    SCRATCH = 0
    KEY1 = 1
    KEY2 = 2
    KEY3 = 3
    KEY4 = 4
    KEY5 = 5
    KEY6 = 6
    KEY7 = 7
    KEY8 = 8
    KEY9 = 9
    KEY10 = 10
    KEY11 = 11
    KEY12 = 12
    KEY13 = 13
    KEY14 = 14
    SCRATCH2 = 15

    @classmethod
    def from_bms_channel(cls, channel: int) -> NoteChannel | None:
        """Map a BMS player-1 channel number to a channel."""
        return _BMS_CHANNELS.get(channel)

    def lane_index(self) -> int:
        """Lane index in the single-play / double-play layout."""
        return self.value

    def lane_index_for_mode(self, mode: PlayMode) -> int:
        """Lane index for the given play mode."""
        if mode is PlayMode.PMS_9KEY:
            if NoteChannel.KEY1.value <= self.value <= NoteChannel.KEY9.value:
                return self.value - 1
            return 0
        return self.value

    @classmethod
    def from_key_lane(cls, lane: int) -> NoteChannel | None:
        """Key channel for lanes 1-7 of the 7-key layout."""
        if 1 <= lane <= 7:
            return cls(lane)
        return None

    @classmethod
    def from_pms_lane(cls, lane: int) -> NoteChannel | None:
        """Channel for lanes 0-8 of the 9-key layout."""
        if 0 <= lane <= 8:
            return cls(lane + 1)
        return None

    @classmethod
    def from_dp_lane(cls, lane: int) -> NoteChannel | None:
        """Channel for lanes 0-15 of the double-play layout."""
        if 0 <= lane < LANE_COUNT_DP:
            return cls(lane)
        return None

    def is_key(self) -> bool:
        return not self.is_scratch()

    def is_scratch(self) -> bool:
        return self in (NoteChannel.SCRATCH, NoteChannel.SCRATCH2)

    def is_p2(self) -> bool:
        return self.value >= NoteChannel.KEY8.value


_BMS_CHANNELS = {
    16: NoteChannel.SCRATCH,
    11: NoteChannel.KEY1,
    12: NoteChannel.KEY2,
    13: NoteChannel.KEY3,
    14: NoteChannel.KEY4,
    15: NoteChannel.KEY5,
    18: NoteChannel.KEY6,
    19: NoteChannel.KEY7,
}


def lane_count(mode: PlayMode) -> int:
    """Number of lanes used by a play mode."""
    return {
        PlayMode.BMS_7KEY: LANE_COUNT_BMS,
        PlayMode.PMS_9KEY: LANE_COUNT_PMS,
        PlayMode.DP_14KEY: LANE_COUNT_DP,
    }[mode]


@dataclass
class Metadata:
    title: str = ""
    subtitle: str | None = None
    artist: str = ""
    genre: str = ""
    bpm: float = 0.0
    play_level: int = 0
    rank: int = 0
    total: float = 0.0
    ln_type: LnType = LnType.LN
    play_mode: PlayMode = PlayMode.BMS_7KEY


@dataclass
class BpmChange:
    measure: int
    position: Fraction
    bpm: float


@dataclass
class StopEvent:
    measure: int
    position: Fraction
    duration_192: int


@dataclass
class MeasureLength:
    measure: int
    length: float


@dataclass
class TimingData:
    initial_bpm: float = 0.0
    bpm_changes: list[BpmChange] = field(default_factory=list)
    stops: list[StopEvent] = field(default_factory=list)
    measure_lengths: list[MeasureLength] = field(default_factory=list)


@dataclass
class Note:
    measure: int
    position: Fraction
    time_ms: float
    channel: NoteChannel
    keysound_id: int
    note_type: NoteType
    long_end_time_ms: float | None = None


@dataclass
class BgmEvent:
    measure: int
    position: Fraction
    time_ms: float
    keysound_id: int


@dataclass
class BgaEvent:
    time_ms: float
    bga_id: int
    layer: BgaLayer


@dataclass
class Chart:
    metadata: Metadata = field(default_factory=Metadata)
    timing_data: TimingData = field(default_factory=TimingData)
    notes: list[Note] = field(default_factory=list)
    bgm_events: list[BgmEvent] = field(default_factory=list)
    bga_events: list[BgaEvent] = field(default_factory=list)

    def max_measure(self) -> int:
        """Highest measure holding a note or BGM event."""
        measures = [n.measure for n in self.notes]
        measures.extend(b.measure for b in self.bgm_events)
        return max(measures, default=0)

    def total_duration_ms(self) -> float:
        """Time of the last note end or BGM event."""
        times = [
            n.long_end_time_ms if n.long_end_time_ms is not None else n.time_ms
            for n in self.notes
        ]
        times.extend(b.time_ms for b in self.bgm_events)
        return max(times, default=0.0) if times else 0.0

    def note_count(self) -> int:
        """Number of judged notes (normal notes and long-note starts)."""
        return sum(
            1
            for n in self.notes
            if n.note_type in (NoteType.NORMAL, NoteType.LONG_START)
        )

    def build_lane_index(self) -> list[list[int]]:
        """Note indices grouped by lane of the 7-key layout."""
        index: list[list[int]] = [[] for _ in range(LANE_COUNT_BMS)]
        for i, note in enumerate(self.notes):
            lane = note.channel.lane_index()
            if lane < LANE_COUNT_BMS:
                index[lane].append(i)
        return index

    def build_lane_index_for_mode(self) -> list[list[int]]:
        """Note indices grouped by lane of the chart's own play mode."""
        mode = self.metadata.play_mode
        index: list[list[int]] = [[] for _ in range(MAX_LANE_COUNT)]
        for i, note in enumerate(self.notes):
            lane = note.channel.lane_index_for_mode(mode)
            if lane < MAX_LANE_COUNT:
                index[lane].append(i)
        return index
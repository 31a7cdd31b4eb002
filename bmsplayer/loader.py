"""Loading of chart files from disk."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from fractions import Fraction
from pathlib import Path

from bmsplayer.bmson import Bmson
from bmsplayer.chart import BgaEvent, BgaLayer, Chart, PlayMode, TimingData
from bmsplayer.errors import FileReadError, ParseError, UnsupportedPlayModeError
from bmsplayer.timing import calculate_time_ms

# #xxxYY:data where xxx is the measure, YY the channel and data a run of object ids.
_BGA_LINE = re.compile(r"^#(\d{3})(04|06|07|0A):([0-9A-Za-z]+)", re.IGNORECASE | re.ASCII)

_BGA_CHANNEL_LAYERS = {
    "04": BgaLayer.BASE,
    "06": BgaLayer.POOR,
    "07": BgaLayer.OVERLAY,
    "0A": BgaLayer.OVERLAY,
}


@dataclass
class BmsLoadResult:
    """A loaded chart together with its sound and image file tables."""

    chart: Chart
    wav_files: dict[int, str] = field(default_factory=dict)
    bmp_files: dict[int, str] = field(default_factory=dict)


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise FileReadError(path, exc) from exc


def read_bms_file(path: str | Path) -> str:
    """Read a chart file as UTF-8, falling back to Shift-JIS."""
    raw = _read_bytes(Path(path))
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        pass
    try:
        return raw.decode("cp932")
    except UnicodeDecodeError:
        raise ParseError("Failed to decode file as UTF-8 or Shift-JIS") from None


def load_bmson(path: str | Path) -> BmsLoadResult:
    """Load a BMSON chart; only the 7-key layout is accepted."""
    path = Path(path)
    raw = _read_bytes(path)
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FileReadError(path, exc) from exc

    bmson = Bmson.from_json(content)
    chart = bmson.to_chart()
    if chart.metadata.play_mode is not PlayMode.BMS_7KEY:
        raise UnsupportedPlayModeError(chart.metadata.play_mode.value)

    return BmsLoadResult(
        chart=chart,
        wav_files=bmson.collect_wav_files(),
        bmp_files=bmson.collect_bmp_files(),
    )


def extract_bga_events_from_source(source: str, timing: TimingData) -> list[BgaEvent]:
    """Collect BGA events straight from BMS text, keeping every layer."""
    events: list[BgaEvent] = []

    for line in source.splitlines():
        match = _BGA_LINE.match(line.strip())
        if match is None:
            continue

        measure = int(match.group(1))
        layer = _BGA_CHANNEL_LAYERS[match.group(2).upper()]
        data = match.group(3)

        obj_count = len(data) // 2
        for i in range(obj_count):
            obj = data[i * 2 : i * 2 + 2]
            if obj == "00":
                continue
            bga_id = int(obj, 36)
            if bga_id == 0:
                continue
            position = Fraction(i, obj_count)
            time_ms = calculate_time_ms(measure, position, timing)
            events.append(BgaEvent(time_ms=time_ms, bga_id=bga_id, layer=layer))

    events.sort(key=lambda e: e.time_ms)
    return events
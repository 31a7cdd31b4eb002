# bmsplayer

Core logic for a BMS rhythm game player: the chart model, BMSON loading,
note timing, BGM scheduling, best-score records and dan certification
courses.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
python -m pytest
```

## Modules

- `bmsplayer.chart`: the chart model. `Chart` holds `Metadata`, `TimingData`
  (`BpmChange`, `StopEvent`, `MeasureLength`), `Note`, `BgmEvent` and
  `BgaEvent`. `NoteChannel` maps BMS channel numbers and lane indices for the
  7-key, 9-key and double-play layouts (`PlayMode`); `lane_count(mode)` gives
  the lane count. `Chart` offers `max_measure()`, `total_duration_ms()`,
  `note_count()`, `build_lane_index()` and `build_lane_index_for_mode()`.
- `bmsplayer.timing`: `calculate_time_ms(measure, position, timing)` turns a
  measure and a `Fraction` position into milliseconds, following BPM changes,
  STOPs (a BPM change at the same position applies first) and measure
  lengths. Also `measure_start_times(chart)`, `beats_to_ms`, `ms_to_beats`
  and `compare_fractions`.
- `bmsplayer.bmson`: `Bmson.from_json(text)` / `Bmson.from_dict(data)` parse a
  BMSON document, raising `ParseError` on a bad shape. `Bmson.to_chart()`
  builds a `Chart`; `collect_wav_files()` and `collect_bmp_files()` give the
  sound and image tables.
- `bmsplayer.loader`: `read_bms_file(path)` reads text as UTF-8, falling back
  to Shift-JIS. `load_bmson(path)` loads a `.bmson` file into a
  `BmsLoadResult` and raises `UnsupportedPlayModeError` for anything but the
  7-key layout. `extract_bga_events_from_source(source, timing)` reads BGA
  events (channels 04, 06, 07, 0A) from BMS text.
- `bmsplayer.errors`: `BmsError` and its subclasses `FileReadError`,
  `ParseError`, `InvalidTimingError`, `KeysoundNotFoundError`,
  `UnsupportedPlayModeError`.
- `bmsplayer.audio`: `find_audio_file(base_path, filename)` finds a keysound,
  trying a lower-case name and the extensions wav, ogg, mp3 and flac.
  `amplitude_to_decibels` converts a 0.0–1.0 volume. `AudioScheduler` hands
  BGM events to any object with a `play_bgm_at(keysound_id, time_ms)` method,
  100 ms ahead by default. `KeysoundLoadResult` tallies loaded and failed
  keysounds.
- `bmsplayer.grade`: `DanGrade` (kyu, dan, kaiden, overjoy), ordered from
  easiest to hardest, with `display_name()`, `next()` and a JSON form such as
  `{"Dan": 1}` or `"Kaiden"`.
- `bmsplayer.course`: `DanCourse` and `DanRequirements`, read from JSON with
  `DanCourse.load(path)`; `load_courses(directory)` loads every valid `.json`
  course below a directory, easiest grade first.
- `bmsplayer.course_state`: `CourseState` follows a course run, carrying the
  gauge between stages and totalling `CourseStats`; `check_requirements()`
  returns a `CoursePassResult`.
- `bmsplayer.score`: `ClearLamp`, `SavedScore` (best lamp, EX score, combo
  and counters) and `compute_file_hash(path)` (SHA-256).
- `bmsplayer.score_repository`: `ScoreRepository` keeps `scores.json` in the
  data directory. Saves are written to a temporary file, checked, and moved
  into place, with the previous file kept as `scores.json.bak`; a corrupt
  file is copied to `scores.json.corrupted` and the backup is used instead.
- `bmsplayer.dan_records`: `DanRepository` keeps `dan_records.json` with a
  `DanRecord` per grade and course.

Both repositories take a `data_dir` argument; without one they use the
user data directory given by `platformdirs`.

## Example

```python
from fractions import Fraction
from pathlib import Path

from bmsplayer.bmson import Bmson
from bmsplayer.timing import calculate_time_ms

chart = Bmson.from_json(Path("song.bmson").read_text(encoding="utf-8")).to_chart()
print(chart.metadata.title, chart.note_count(), chart.total_duration_ms())
print(calculate_time_ms(1, Fraction(0), chart.timing_data))
```

## What it does not do

- It does not parse BMS or PMS text into a `Chart`; from such text it only
  extracts BGA events. Full charts come from BMSON.
- It plays no sound and decodes no audio files. `AudioScheduler` only calls
  the `play_bgm_at` method of the object you pass it.
- It has no game screen, input handling, key bindings, settings file or
  online ranking, and installs no command.
import builtins

import pytest

from midi_conversion import config as config_module
from midi_conversion.config import ConversionConfig, load_conversion_config
from midi_conversion.events import RawEvent, ProgramChange, NoteOn, NoteOff, TempoChange
from midi_conversion.exceptions import FormatError, ConfigurationError
from midi_conversion.instruments import MAX_NOTE_ID
from midi_conversion.midi_converter import convert, normalize_song, scale_velocity
from midi_conversion.song import Song, Note

CONFIG = ConversionConfig()


def notes_of(song):
    return [(n.time, n.note_id, n.velocity) for n in song.notes]


def test_single_note_at_default_resolution():
    track = [
        RawEvent(0, TempoChange(500000)),
        RawEvent(0, ProgramChange(0, 0)),
        RawEvent(480, NoteOn(0, 60, 100)),
        RawEvent(960, NoteOff(0, 60)),
    ]
    song = convert([track], 480, config=CONFIG)
    # 1041us per tick after truncation: the note lands at 499ms, HARP pitch 6
    assert notes_of(song) == [(499, 6, 78)]
    # first note is under the lead-in: notes stay, length grows by 1000 - 499
    assert song.length == 999 + 501


def test_velocity_one_scales_to_zero_and_is_skipped():
    song = convert([[RawEvent(0, NoteOn(3, 60, 1))]], 480, config=CONFIG)
    assert song.notes == []
    assert song.stats.total_notes == 1
    assert song.stats.skipped_notes == 1
    assert song.stats.converted_notes == 0
    assert song.length == 0


def test_velocity_zero_is_skipped():
    song = convert([[RawEvent(0, NoteOn(0, 60, 0))]], 480, config=CONFIG)
    assert song.notes == []
    assert song.stats.skipped_notes == 1


def test_scale_velocity():
    assert scale_velocity(127) == 100
    assert scale_velocity(100) == 78
    assert scale_velocity(64) == 50
    assert scale_velocity(2) == 1
    assert scale_velocity(1) == 0


def test_percussion_ignores_program():
    track = [
        RawEvent(0, ProgramChange(9, 40)),
        RawEvent(0, NoteOn(9, 38, 127)),
    ]
    song = convert([track], 480, config=CONFIG)
    assert notes_of(song) == [(0, 8 + 2 * 25, 100)]


def test_unknown_percussion_key_is_skipped():
    song = convert([[RawEvent(0, NoteOn(9, 20, 127))]], 480, config=CONFIG)
    assert song.notes == []
    assert song.stats.skipped_notes == 1


def test_program_state_is_per_track_and_channel():
    tracks = [
        [RawEvent(0, ProgramChange(0, 24)), RawEvent(0, NoteOn(0, 60, 127))],
        # same channel number in another track keeps the default program 0
        [RawEvent(0, NoteOn(0, 60, 127)), RawEvent(0, NoteOn(1, 60, 127))],
    ]
    song = convert(tracks, 480, config=CONFIG)
    assert [n.note_id for n in song.notes] == [18 + 7 * 25, 6, 6]


def test_program_change_only_affects_later_notes():
    track = [
        RawEvent(0, NoteOn(0, 60, 127)),
        RawEvent(0, ProgramChange(0, 24)),
        RawEvent(0, NoteOn(0, 60, 127)),
    ]
    song = convert([track], 480, config=CONFIG)
    assert [n.note_id for n in song.notes] == [6, 18 + 7 * 25]


def test_unresolvable_note_still_extends_length():
    song = convert([[RawEvent(3000, NoteOn(0, 10, 100))]], 500, config=CONFIG)
    assert song.notes == []
    assert song.stats.skipped_notes == 1
    assert song.length == 3000


def test_note_off_defines_length():
    track = [RawEvent(500, NoteOn(0, 60, 100)), RawEvent(800, NoteOff(0, 60))]
    song = convert([track], 500, config=CONFIG)
    assert song.length == 800 + 500


def test_tempo_from_other_track_applies():
    tracks = [
        [RawEvent(0, TempoChange(250000))],
        [RawEvent(2000, NoteOn(0, 60, 127))],
    ]
    song = convert(tracks, 500, config=CONFIG)
    assert notes_of(song) == [(1000, 6, 100)]
    assert song.length == 1000


def test_tempo_change_mid_song():
    tracks = [
        [RawEvent(1000, TempoChange(1000000))],
        [RawEvent(1000, NoteOn(0, 60, 127)), RawEvent(2000, NoteOn(0, 62, 127))],
    ]
    song = convert(tracks, 500, config=CONFIG)
    assert notes_of(song) == [(1000, 6, 100), (3000, 8, 100)]
    assert song.length == 3000


def test_notes_sorted_with_stable_ties():
    tracks = [
        [RawEvent(2000, NoteOn(0, 60, 127))],
        [RawEvent(1000, NoteOn(0, 61, 127)), RawEvent(2000, NoteOn(0, 62, 127))],
    ]
    song = convert(tracks, 500, config=CONFIG)
    assert [(n.time, n.note_id) for n in song.notes] == [(1000, 7), (2000, 6), (2000, 8)]


def test_late_start_is_shifted_to_lead_in():
    track = [RawEvent(5000, NoteOn(0, 60, 127)), RawEvent(7000, NoteOn(0, 62, 127)),
             RawEvent(10000, NoteOff(0, 62))]
    song = convert([track], 500, config=CONFIG)
    assert [n.time for n in song.notes] == [1000, 3000]
    assert song.length == 6000


def test_early_start_keeps_times_but_changes_length():
    # Pinned behaviour: the length is shifted by (first - lead_in) even when the
    # notes are not, so a song starting at 500ms gets 500ms longer.
    track = [RawEvent(500, NoteOn(0, 60, 127)), RawEvent(2000, NoteOff(0, 60))]
    song = convert([track], 500, config=CONFIG)
    assert [n.time for n in song.notes] == [500]
    assert song.length == 2500


def test_first_note_exactly_at_lead_in():
    track = [RawEvent(1000, NoteOn(0, 60, 127)), RawEvent(2000, NoteOff(0, 60))]
    song = convert([track], 500, config=CONFIG)
    assert [n.time for n in song.notes] == [1000]
    assert song.length == 2000


def test_custom_lead_in():
    track = [RawEvent(5000, NoteOn(0, 60, 127))]
    song = convert([track], 500, config=ConversionConfig(lead_in_ms=0))
    assert [n.time for n in song.notes] == [0]
    assert song.length == 0


def test_normalize_song_empty_is_untouched():
    song = Song(length=1234)
    normalize_song(song, 1000)
    assert song.length == 1234


def test_normalize_song_direct():
    song = Song(notes=[Note(5000, 1, 50), Note(6000, 2, 50)], length=10000)
    normalize_song(song, 1000)
    assert [n.time for n in song.notes] == [1000, 2000]
    assert song.length == 6000


def test_stats_summary():
    track = [RawEvent(0, NoteOn(0, 60, 100)), RawEvent(0, NoteOn(0, 5, 100))]
    song = convert([track], 480, config=CONFIG)
    assert song.conversion_stats == "Total notes: 2, converted: 1, skipped: 1 (50.0%)"


def test_progress_is_throttled_and_completed():
    track = [RawEvent(0, ProgramChange(0, 0)) for _ in range(250)]
    calls = []
    convert([track], 480, lambda *args: calls.append(args), config=CONFIG)
    assert calls == [(40, 100, 250), (80, 200, 250), (100, 250, 250)]


def test_progress_counts_events_across_tracks():
    tracks = [[RawEvent(0, ProgramChange(0, 0))] * 60, [RawEvent(0, ProgramChange(0, 0))] * 60]
    calls = []
    convert(tracks, 480, lambda *args: calls.append(args), config=CONFIG)
    assert calls == [(83, 100, 120), (100, 120, 120)]


def test_progress_on_empty_input():
    calls = []
    song = convert([], 480, lambda *args: calls.append(args), config=CONFIG)
    assert song.notes == []
    assert song.length == 0
    assert calls == [(100, 0, 0)]


def build_mixed_tracks():
    conductor = [RawEvent(0, TempoChange(400000)), RawEvent(960, TempoChange(600000))]
    melody = []
    drums = []
    for i in range(40):
        tick = 3000 + i * 120
        melody.append(RawEvent(tick, NoteOn(0, 40 + i * 2, 20 + i * 2)))
        melody.append(RawEvent(tick + 100, NoteOff(0, 40 + i * 2)))
        drums.append(RawEvent(tick, NoteOn(9, 30 + i, 1 + i * 3)))
    return [conductor, melody, drums]


def test_progress_callback_does_not_change_result():
    tracks = build_mixed_tracks()
    without = convert(tracks, 480, config=ConversionConfig(progress_interval=1, yield_interval=1))
    with_progress = convert(tracks, 480, lambda *args: None,
                            config=ConversionConfig(progress_interval=1, yield_interval=1))
    assert without.to_dict() == with_progress.to_dict()


def test_conversion_is_idempotent():
    tracks = build_mixed_tracks()
    assert convert(tracks, 480, config=CONFIG).to_dict() == convert(tracks, 480, config=CONFIG).to_dict()


def test_output_invariants():
    song = convert(build_mixed_tracks(), 480, config=CONFIG)
    assert song.notes
    times = [n.time for n in song.notes]
    assert times == sorted(times)
    assert times[0] == 1000
    for note in song.notes:
        assert 1 <= note.velocity <= 100
        assert 0 <= note.note_id <= MAX_NOTE_ID
    assert song.length >= times[-1]
    stats = song.stats
    assert stats.total_notes == 80
    assert stats.converted_notes + stats.skipped_notes == stats.total_notes
    assert stats.converted_notes == len(song.notes)


@pytest.mark.parametrize('ticks_per_quarter', [0, -480, 480.0, '480', True])
def test_invalid_resolution(ticks_per_quarter):
    with pytest.raises(FormatError):
        convert([[]], ticks_per_quarter, config=CONFIG)


@pytest.mark.parametrize('track', [
    [('not', 'an', 'event')],
    [RawEvent(0, 'note_on')],
    [RawEvent(-1, NoteOn(0, 60, 100))],
    [RawEvent(100, NoteOn(0, 60, 100)), RawEvent(50, NoteOff(0, 60))],
    [RawEvent(0, NoteOn(0, 60, 128))],
    [RawEvent(0, NoteOn(16, 60, 100))],
    [RawEvent(0, ProgramChange(0, 200))],
    [RawEvent(0, TempoChange(-1))],
])
def test_malformed_events(track):
    with pytest.raises(FormatError):
        convert([track], 480, config=CONFIG)


def test_events_by_track_must_be_a_sequence():
    with pytest.raises(FormatError):
        convert(None, 480, config=CONFIG)
    with pytest.raises(FormatError):
        convert([None], 480, config=CONFIG)


def test_invalid_config_type():
    with pytest.raises(ConfigurationError):
        convert([[]], 480, config={'lead_in_ms': 1000})


def test_convert_without_config_reads_no_file(monkeypatch):
    opened = []
    real_open = builtins.open

    def recording_open(*args, **kwargs):
        opened.append(args[0] if args else kwargs.get('file'))
        return real_open(*args, **kwargs)

    monkeypatch.setattr(builtins, 'open', recording_open)
    song = convert([[RawEvent(5000, NoteOn(0, 60, 127))]], 500)
    assert opened == []
    assert [n.time for n in song.notes] == [1000]
    assert song.length == 1000


def test_convert_default_lead_in_ignores_config_file(tmp_path, monkeypatch):
    path = tmp_path / 'conversion.yaml'
    path.write_text("lead_in_ms: 0\n", encoding='utf-8')
    monkeypatch.setattr(config_module, 'DEFAULT_CONFIG_PATH', str(path))
    assert load_conversion_config().lead_in_ms == 0
    song = convert([[RawEvent(5000, NoteOn(0, 60, 127))]], 500)
    assert [n.time for n in song.notes] == [1000]

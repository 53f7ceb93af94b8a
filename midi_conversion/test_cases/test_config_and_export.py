import csv
import json
import os

import pytest
import yaml

import midi_conversion
from midi_conversion.config import (ConversionConfig, DEFAULT_CONFIG, DEFAULT_CONFIG_PATH, config_from_dict,
                                    load_conversion_config, resolve_config)
from midi_conversion.exceptions import ConfigurationError
from midi_conversion.exporter import export_song, ExportError
from midi_conversion.song import Song, Note, ConversionStats
from midi_conversion.validators import ValidationError


def test_defaults():
    config = ConversionConfig()
    assert config.lead_in_ms == 1000
    assert config.progress_interval == 100
    assert config.yield_interval == 1000
    assert config.max_file_bytes == 10 * 1024 * 1024


def test_bundled_config_matches_defaults():
    assert load_conversion_config() == DEFAULT_CONFIG


def test_bundled_config_ships_inside_package():
    package_dir = os.path.dirname(os.path.abspath(midi_conversion.__file__))
    assert os.path.isfile(DEFAULT_CONFIG_PATH)
    assert os.path.abspath(DEFAULT_CONFIG_PATH).startswith(package_dir + os.sep)


def test_partial_config_file(tmp_path):
    path = tmp_path / 'conversion.yaml'
    path.write_text("lead_in_ms: 500\nprogress_interval: 10\n", encoding='utf-8')
    config = load_conversion_config(str(path))
    assert config.lead_in_ms == 500
    assert config.progress_interval == 10
    assert config.yield_interval == 1000


def test_invalid_values_fall_back(tmp_path):
    path = tmp_path / 'conversion.yaml'
    path.write_text("lead_in_ms: -5\nprogress_interval: fast\nyield_interval: 0\nmax_file_bytes: true\n",
                    encoding='utf-8')
    assert load_conversion_config(str(path)) == DEFAULT_CONFIG


def test_lead_in_may_be_zero():
    assert config_from_dict({'lead_in_ms': 0}).lead_in_ms == 0


def test_missing_or_broken_file_falls_back(tmp_path):
    assert load_conversion_config(str(tmp_path / 'nope.yaml')) == DEFAULT_CONFIG
    broken = tmp_path / 'broken.yaml'
    broken.write_text("lead_in_ms: [1, 2\n", encoding='utf-8')
    assert load_conversion_config(str(broken)) == DEFAULT_CONFIG
    empty = tmp_path / 'empty.yaml'
    empty.write_text("", encoding='utf-8')
    assert load_conversion_config(str(empty)) == DEFAULT_CONFIG


def test_invalid_config_path():
    with pytest.raises(ValidationError):
        load_conversion_config('')
    with pytest.raises(ValidationError):
        load_conversion_config(42)


def test_resolve_config():
    custom = ConversionConfig(lead_in_ms=0)
    assert resolve_config(custom) is custom
    assert resolve_config(None) == DEFAULT_CONFIG
    assert resolve_config(None, load_default=False) is DEFAULT_CONFIG
    with pytest.raises(ConfigurationError):
        resolve_config({'lead_in_ms': 0})


def make_song():
    return Song(name='demo', notes=[Note(1000, 6, 78), Note(1500, 58, 100)], length=2500,
                stats=ConversionStats(3, 2, 1))


def test_song_dict_round_trip():
    song = make_song()
    assert Song.from_dict(song.to_dict()) == song


def test_export_json(tmp_path):
    path = tmp_path / 'song.json'
    export_song(make_song(), str(path), 'json')
    data = json.loads(path.read_text(encoding='utf-8'))
    assert data['length'] == 2500
    assert data['notes'][1] == {'time': 1500, 'note_id': 58, 'velocity': 100}
    assert data['conversion_stats'] == "Total notes: 3, converted: 2, skipped: 1 (33.3%)"


def test_export_csv(tmp_path):
    path = tmp_path / 'song.csv'
    export_song(make_song(), str(path), 'CSV')
    with open(path, encoding='utf-8', newline='') as f:
        rows = list(csv.DictReader(f))
    assert rows[0] == {'time': '1000', 'note_id': '6', 'velocity': '78'}
    assert len(rows) == 2


def test_export_csv_without_notes(tmp_path):
    with pytest.raises(ExportError):
        export_song(Song(), str(tmp_path / 'empty.csv'), 'csv')


def test_export_yaml(tmp_path):
    path = tmp_path / 'song.yaml'
    export_song(make_song(), str(path), 'yaml')
    data = yaml.safe_load(path.read_text(encoding='utf-8'))
    assert data['name'] == 'demo'
    assert data['stats'] == {'total_notes': 3, 'converted_notes': 2, 'skipped_notes': 1}


def test_export_text(tmp_path):
    path = tmp_path / 'song.txt'
    export_song(make_song(), str(path), 'txt')
    text = path.read_text(encoding='utf-8')
    assert "Length: 2.50s" in text
    assert "1500ms: note 58, velocity 100" in text


def test_export_unsupported_format(tmp_path):
    with pytest.raises(ExportError):
        export_song(make_song(), str(tmp_path / 'song.xml'), 'xml')


def test_export_to_missing_directory(tmp_path):
    with pytest.raises(ExportError):
        export_song(make_song(), str(tmp_path / 'missing' / 'song.json'), 'json')

import math

import pytest
from PySide6.QtCore import QCoreApplication

from cutline.config import EditorConfig
from cutline.core.editing import find_overlaps
from cutline.core.errors import InvalidDuration
from cutline.core.models import Clip, ImageOverlay, LibraryItem, OverlayTransform, Subtitle
from cutline.core.store import TimelineStore


def _ensure_app():
    QCoreApplication.instance() or QCoreApplication([])


def _store(*durations, config=None):
    _ensure_app()
    store = TimelineStore(config=config)
    for i, d in enumerate(durations):
        item = store.library.add(LibraryItem(name=f"c{i}", media_ref=f"/media/c{i}.mp4", native_duration=d))
        store.add_clip(item)
    return store


def _layout(store):
    return [(c.start_time, c.end_time) for c in store.clips()]


def _assert_consistent(store):
    clips = store.clips()
    assert find_overlaps(clips) == []
    assert store.total_duration == max((c.end_time for c in clips), default=0.0)
    assert 0.0 <= store.cursor_time <= store.total_duration


def test_add_clip_by_library_id_updates_duration():
    store = _store()
    durations = []
    store.durationChanged.connect(durations.append)
    item = store.library.add(LibraryItem(name="a", media_ref="/a.mp4", native_duration=4.0))
    clip = store.add_clip(item.id)
    assert clip.media_ref == "/a.mp4"
    assert store.total_duration == 4.0
    assert durations == [4.0]
    assert store.add_clip("missing") is None


def test_add_clip_with_invalid_duration_raises():
    store = _store(5)
    with pytest.raises(InvalidDuration):
        store.add_clip(LibraryItem(name="bad", media_ref="/bad.mp4", native_duration=0))
    assert _layout(store) == [(0, 5)]


def test_duration_stays_consistent_across_edits():
    store = _store(5, 3, 4)
    ids = [c.id for c in store.clips()]
    store.move_clip(ids[0], 9)
    _assert_consistent(store)
    store.trim_clip(ids[1], "end", 1)
    _assert_consistent(store)
    store.split_clip(ids[2], store.get_clip(ids[2]).start_time + 2)
    _assert_consistent(store)
    store.remove_clip(ids[0])
    _assert_consistent(store)


def test_rejected_operations_return_false_and_change_nothing():
    store = _store(5, 3)
    before = _layout(store)
    changed = []
    store.clipsChanged.connect(lambda: changed.append(True))
    assert store.move_clip("nope", 2) is False
    assert store.remove_clip("nope") is False
    assert store.trim_clip("nope", "start", 1) is False
    assert store.split_clip("nope", 1) is None
    assert store.split_clip(store.clips()[0].id, 0.05) is None
    assert store.move_clip(store.clips()[0].id, math.nan) is False
    assert _layout(store) == before
    assert changed == []


def test_remove_clip_under_cursor_pauses_and_moves_cursor():
    store = _store(5, 3, 4)
    b = store.clips()[1].id
    store.set_cursor(6)
    store.play()
    assert store.remove_clip(b)
    assert not store.is_playing
    assert store.cursor_time == 5
    assert _layout(store) == [(0, 5), (5, 9)]
    assert store.active_clip().clip.name == "c2"


def test_remove_clip_elsewhere_keeps_playing_and_clamps_cursor():
    store = _store(5, 3, 4)
    store.set_cursor(11)
    store.play()
    store.remove_clip(store.clips()[0].id)
    assert store.is_playing
    assert store.total_duration == 7
    assert store.cursor_time == 7


def test_removing_last_clip_stops_playback():
    store = _store(5)
    store.play()
    store.remove_clip(store.clips()[0].id)
    assert store.total_duration == 0
    assert store.cursor_time == 0
    assert not store.is_playing


def test_remove_selected_clip_clears_selection():
    store = _store(5, 3)
    clip_id = store.clips()[0].id
    selections = []
    store.selectionChanged.connect(selections.append)
    assert store.select_clip(clip_id)
    store.remove_clip(clip_id)
    assert store.selected_clip_id is None
    assert selections == [clip_id, None]
    assert store.select_clip("nope") is False


def test_trim_moves_cursor_out_of_trimmed_region():
    store = _store(10)
    clip_id = store.clips()[0].id
    store.set_cursor(8)
    assert store.trim_clip(clip_id, "end", 6)
    assert store.cursor_time == 6
    store.set_cursor(1)
    assert store.trim_clip(clip_id, "start", 3)
    assert store.cursor_time == 3
    assert store.get_clip(clip_id).source_in == 3


def test_split_returns_tail_and_keeps_cursor():
    store = _store(10)
    store.set_cursor(7)
    tail = store.split_clip(store.clips()[0].id, 4)
    assert (tail.start_time, tail.end_time) == (4, 10)
    assert store.cursor_time == 7
    assert store.active_clip().clip.id == tail.id
    assert store.active_clip().media_time == pytest.approx(7)


def test_snapshots_are_isolated_from_the_store():
    store = _store(5)
    snap = store.snapshot()
    snap.clips[0].start_time = 99
    snap.playback.cursor_time = 3
    store.clips()[0].end_time = 1
    assert _layout(store) == [(0, 5)]
    assert store.cursor_time == 0


def test_play_is_idempotent_and_refused_when_empty():
    empty = _store()
    assert empty.play() is False
    assert not empty.is_playing

    store = _store(5)
    events = []
    store.playingChanged.connect(events.append)
    assert store.play()
    assert store.play()
    assert events == [True]
    store.stop()
    store.stop()
    assert events == [True, False]


def test_play_at_end_rewinds():
    store = _store(5)
    store.set_cursor(5)
    store.play()
    assert store.cursor_time == 0


def test_toggle_play():
    store = _store(5)
    assert store.toggle_play() is True
    assert store.toggle_play() is False
    assert not store.is_playing


def test_set_cursor_clamps_and_ignores_garbage():
    store = _store(5, 3)
    assert store.set_cursor(-3)
    assert store.cursor_time == 0
    assert store.set_cursor(100)
    assert store.cursor_time == 8
    assert store.set_cursor(math.nan) is False
    assert store.set_cursor("soon") is False
    assert store.cursor_time == 8


def test_jump_steps_are_clamped():
    store = _store(5, 3, 4)
    store.jump_forward()
    assert store.cursor_time == 5
    store.jump_backward()
    store.jump_backward()
    assert store.cursor_time == 0
    store.set_cursor(10)
    store.jump_forward()
    assert store.cursor_time == 12


def test_zoom_is_clamped():
    store = _store(5)
    zooms = []
    store.zoomChanged.connect(zooms.append)
    assert store.set_zoom(5) == 2.0
    assert store.set_zoom(0.1) == 0.5
    assert store.set_zoom(0.5) == 0.5
    assert zooms == [2.0, 0.5]


def test_custom_config_limits():
    store = _store(20, config=EditorConfig(jump_step=2.0, zoom_max=4.0))
    store.jump_forward()
    assert store.cursor_time == 2
    assert store.set_zoom(3) == 3


def test_advance_loops_to_start_at_end():
    _ensure_app()
    store = TimelineStore()
    store.bulk_replace([Clip(media_ref="/long.mp4", start_time=0, end_time=20)])
    store.set_cursor(19.9)
    store.play()
    events = []
    store.playingChanged.connect(events.append)
    tick = store.advance(0.3)
    assert tick.reached_end
    assert not store.is_playing
    assert store.cursor_time == 0
    assert events == [False]


def test_advance_while_stopped_does_not_move():
    store = _store(5)
    store.set_cursor(2)
    tick = store.advance(1.0)
    assert store.cursor_time == 2
    assert tick.active.local_offset == 2


def test_bulk_replace_normalizes_and_validates():
    store = _store(5)
    old_id = store.clips()[0].id
    store.select_clip(old_id)
    store.bulk_replace(
        [
            Clip(media_ref="/a.mp4", start_time=0, end_time=4),
            Clip(media_ref="/b.mp4", start_time=2, end_time=5),
        ]
    )
    assert _layout(store) == [(0, 4), (4, 7)]
    assert store.selected_clip_id is None
    with pytest.raises(InvalidDuration):
        store.bulk_replace([Clip(media_ref="/c.mp4", start_time=1, end_time=1)])
    assert _layout(store) == [(0, 4), (4, 7)]


def test_add_overlay_clip_places_image_clip():
    store = _store(5)
    overlay = ImageOverlay(media_ref="/logo.png", start_time=0, end_time=3, opacity=0.4)
    clip = store.add_overlay_clip(overlay, insert_at=5, name="logo")
    assert clip.kind.value == "image"
    assert (clip.start_time, clip.end_time) == (5, 8)
    assert isinstance(clip.overlay, OverlayTransform)
    assert clip.overlay.opacity == 0.4
    open_ended = store.add_overlay_clip(ImageOverlay(media_ref="/x.png", start_time=2, end_time=2))
    assert open_ended.duration == store.config.default_overlay_duration


def test_frame_collects_everything_at_cursor():
    store = _store(5, 5)
    store.subtitles.add(Subtitle(text="hello", start_time=6, end_time=8))
    store.overlays.add(ImageOverlay(media_ref="/logo.png", start_time=5, end_time=7))
    track = store.audio.create("music", "/music.mp3", duration=10)
    store.set_cursor(6.5)
    frame = store.frame()
    assert frame.has_clip
    assert frame.local_offset == pytest.approx(1.5)
    assert [s.text for s in frame.subtitles] == ["hello"]
    assert [o.media_ref for o in frame.overlays] == ["/logo.png"]
    assert [(a.track_id, a.local_offset) for a in frame.audio] == [(track.id, 6.5)]
    assert frame.audio[0].gain == pytest.approx(0.8)


def test_manager_changes_emit_store_signals():
    store = _store()
    fired = []
    store.audioChanged.connect(lambda: fired.append("audio"))
    store.subtitlesChanged.connect(lambda: fired.append("subtitles"))
    store.overlaysChanged.connect(lambda: fired.append("overlays"))
    store.libraryChanged.connect(lambda: fired.append("library"))
    store.audio.create("a", "/a.mp3")
    store.subtitles.add(Subtitle(text="x", start_time=0, end_time=1))
    store.overlays.add(ImageOverlay(media_ref="/o.png"))
    store.library.add(LibraryItem(name="v", media_ref="/v.mp4", native_duration=1))
    assert fired == ["audio", "subtitles", "overlays", "library"]


def test_import_media_image(tmp_path):
    from PIL import Image

    path = tmp_path / "still.png"
    Image.new("RGB", (16, 8), (255, 0, 0)).save(path)
    store = _store()
    item = store.import_media(path)
    assert item.name == "still"
    assert item.kind.value == "image"
    assert item.duration == store.config.image_duration
    clip = store.add_clip(item)
    assert clip.kind.value == "image"


def test_import_media_missing_file_raises(tmp_path):
    store = _store()
    with pytest.raises(InvalidDuration):
        store.import_media(tmp_path / "nothing.mp4")
    assert len(store.library) == 0


def test_trim_with_unknown_edge_is_rejected():
    store = _store(5)
    assert store.trim_clip(store.clips()[0].id, "middle", 2) is False
    assert _layout(store) == [(0, 5)]


def test_end_trim_leaves_cursor_on_exclusive_end():
    store = _store(5, 3)
    first = store.clips()[0].id
    store.set_cursor(4)
    assert store.trim_clip(first, "end", 3)
    assert store.cursor_time == 3
    assert store.active_clip() is None
    second = store.clips()[1]
    assert store.move_clip(second.id, 3)
    assert store.active_clip().clip.id == second.id


def test_non_finite_zoom_is_ignored():
    store = _store(5)
    store.set_zoom(1.5)
    assert store.set_zoom(math.nan) == 1.5
    assert store.set_zoom(math.inf) == 1.5
    assert store.zoom == 1.5

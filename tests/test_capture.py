import asyncio

import numpy as np
import pytest

from snowglobe import capture
from snowglobe.capture import (
    CaptureController,
    GifDocument,
    build_video_encoder_cmd,
    downsample,
    export_name,
)
from snowglobe.config import capture_settings

from .conftest import no_sleep


class FakeDocument:
    instances = []

    def __init__(self):
        self.added = []
        self.finished_with = None
        FakeDocument.instances.append(self)

    def add(self, frame, delay_ms):
        self.added.append((frame.shape, delay_ms))

    def finish(self):
        self.finished_with = len(self.added)
        return b"GIF89a-fake"


class BrokenDocument(FakeDocument):
    def add(self, frame, delay_ms):
        raise ValueError("palette exploded")


class CrashingDocument(FakeDocument):
    def add(self, frame, delay_ms):
        raise RuntimeError("quantizer crashed")


class MemorySink:
    def __init__(self):
        self.files = {}

    def __call__(self, name, data):
        self.files[name] = data
        return None


class FakeStream:
    def __init__(self, chunks=()):
        self.chunks = list(chunks)

    async def read(self, n=-1):
        return self.chunks.pop(0) if self.chunks else b""


class FakeStdin:
    def __init__(self):
        self.bytes_written = 0
        self.writes = 0
        self.closed = False

    def write(self, data):
        self.bytes_written += len(data)
        self.writes += 1

    async def drain(self):
        return None

    def close(self):
        self.closed = True


class FakeProc:
    def __init__(self, rc=0, out=(b"\x1aE\xdf\xa3", b"webm-body"), err=b""):
        self.stdin = FakeStdin()
        self.stdout = FakeStream(out)
        self.stderr = FakeStream([err] if err else [])
        self._rc = rc
        self.returncode = None
        self.killed = False

    async def wait(self):
        self.returncode = self._rc
        return self._rc

    def kill(self):
        self.killed = True


def fake_spawn(proc, seen):
    async def spawn(*cmd, **kwargs):
        seen.append(list(cmd))
        return proc

    return spawn


def test_export_name():
    assert export_name("winter", "gif") == "magic-globe-winter.gif"
    assert export_name("CITY_NIGHT", "webm") == "magic-globe-city_night.webm"


def test_downsample_halves():
    frame = np.zeros((701, 700, 3), dtype=np.uint8)
    assert downsample(frame, 0.5).shape == (350, 350, 3)
    assert downsample(frame, 1.0) is frame


def test_gif_capture_collects_all_frames_before_finishing(make_globe):
    FakeDocument.instances.clear()
    sink = MemorySink()
    globe = make_globe("winter", size=200)
    globe.step()
    ctl = CaptureController(globe, sink=sink, sleep=no_sleep, gif_document=FakeDocument)

    result = asyncio.run(ctl.capture("gif"))

    assert result.ok, result.error
    assert result.frames == 45
    doc = FakeDocument.instances[-1]
    assert doc.finished_with == 45
    assert doc.added[0] == ((100, 100, 3), 67)
    assert sink.files == {"magic-globe-winter.gif": b"GIF89a-fake"}
    assert not ctl.is_recording


def test_real_gif_document_produces_gif_bytes():
    doc = GifDocument()
    rng = np.random.default_rng(0)
    for _ in range(3):
        doc.add(rng.integers(0, 255, (20, 20, 3), dtype=np.uint8), 67)
    data = doc.finish()
    assert data[:6] in (b"GIF87a", b"GIF89a")
    assert len(doc) == 3


def test_empty_gif_document_fails():
    with pytest.raises(capture.EncoderError):
        GifDocument().finish()


def test_capture_without_surface_fails_fast(make_globe):
    globe = make_globe("rain")
    globe.detach()
    sink = MemorySink()
    ctl = CaptureController(globe, sink=sink, sleep=no_sleep, gif_document=FakeDocument)
    result = asyncio.run(ctl.capture("gif"))
    assert not result.ok
    assert "surface" in result.error
    assert sink.files == {}
    assert not ctl.is_recording


def test_video_without_ffmpeg_fails_fast(make_globe, monkeypatch):
    monkeypatch.setattr(capture, "which_ffmpeg", lambda: None)
    seen = []
    ctl = CaptureController(make_globe("rain"), sink=MemorySink(), sleep=no_sleep, spawn=fake_spawn(FakeProc(), seen))
    result = asyncio.run(ctl.capture("webm"))
    assert not result.ok
    assert "ffmpeg" in result.error
    assert seen == []
    assert not ctl.is_recording


def test_encoder_failure_clears_flag(make_globe):
    ctl = CaptureController(make_globe("rain"), sink=MemorySink(), sleep=no_sleep, gif_document=BrokenDocument)
    result = asyncio.run(ctl.capture("gif"))
    assert not result.ok
    assert "palette exploded" in result.error
    assert not ctl.is_recording


def test_second_capture_refused_while_busy(make_globe):
    ctl = CaptureController(make_globe("rain"), sink=MemorySink(), sleep=no_sleep, gif_document=FakeDocument)
    ctl.is_recording = True
    result = asyncio.run(ctl.capture("gif"))
    assert not result.ok
    assert "in progress" in result.error
    assert ctl.is_recording


def test_concurrent_captures_only_one_runs(make_globe):
    sink = MemorySink()
    ctl = CaptureController(make_globe("sakura"), sink=sink, gif_document=FakeDocument)

    async def main():
        return await asyncio.gather(
            ctl.capture("gif", duration_ms=200),
            ctl.capture("gif", duration_ms=200),
        )

    first, second = asyncio.run(main())
    assert first.ok
    assert not second.ok
    assert len(sink.files) == 1


def test_video_capture_streams_frames_to_ffmpeg(make_globe):
    proc = FakeProc()
    seen = []
    sink = MemorySink()
    globe = make_globe("fish", size=200)
    globe.step()
    ctl = CaptureController(
        globe, sink=sink, sleep=no_sleep, ffmpeg="/usr/bin/ffmpeg", spawn=fake_spawn(proc, seen)
    )
    result = asyncio.run(ctl.capture("webm", duration_ms=100))

    assert result.ok, result.error
    assert result.frames == 3
    assert proc.stdin.writes == 3
    assert proc.stdin.bytes_written == 3 * 200 * 200 * 3
    assert proc.stdin.closed
    assert sink.files == {"magic-globe-fish.webm": b"\x1aE\xdf\xa3webm-body"}
    assert seen[0][0] == "/usr/bin/ffmpeg"
    assert "200x200" in seen[0]


def test_video_capture_reports_ffmpeg_exit_code(make_globe):
    proc = FakeProc(rc=1, out=(), err=b"Unknown encoder")
    ctl = CaptureController(
        make_globe("fish"), sink=MemorySink(), sleep=no_sleep, ffmpeg="ffmpeg", spawn=fake_spawn(proc, [])
    )
    result = asyncio.run(ctl.capture("mp4", duration_ms=50))
    assert not result.ok
    assert "code 1" in result.error
    assert "Unknown encoder" in result.error
    assert not ctl.is_recording


def test_build_video_encoder_cmd_formats():
    webm = build_video_encoder_cmd("ffmpeg", 700, 700, 30.0, capture_settings("webm"))
    assert webm[-3:] == ["-f", "webm", "pipe:1"]
    assert "libvpx-vp9" in webm and "-deadline" in webm
    mp4 = build_video_encoder_cmd("ffmpeg", 700, 700, 30.0, capture_settings("mp4"))
    assert "frag_keyframe+empty_moov" in mp4
    assert mp4[-3:] == ["-f", "mp4", "pipe:1"]


def test_unexpected_gif_error_is_reported_not_raised(make_globe):
    sink = MemorySink()
    ctl = CaptureController(make_globe("rain"), sink=sink, sleep=no_sleep, gif_document=CrashingDocument)
    result = asyncio.run(ctl.capture("gif"))
    assert not result.ok
    assert "quantizer crashed" in result.error
    assert sink.files == {}
    assert not ctl.is_recording


class ExplodingStdin(FakeStdin):
    def write(self, data):
        raise RuntimeError("pipe state corrupted")


def test_unexpected_video_error_kills_encoder_and_is_reported(make_globe):
    proc = FakeProc()
    proc.stdin = ExplodingStdin()
    sink = MemorySink()
    ctl = CaptureController(
        make_globe("fish"), sink=sink, sleep=no_sleep, ffmpeg="ffmpeg", spawn=fake_spawn(proc, [])
    )
    result = asyncio.run(ctl.capture("webm", duration_ms=100))
    assert not result.ok
    assert "pipe state corrupted" in result.error
    assert proc.killed
    assert sink.files == {}
    assert not ctl.is_recording

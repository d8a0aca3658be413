"""
Capture / export.

Two recorders sample whatever the render loop is currently producing; neither
touches scene state, only `surface.snapshot()`:

* `VideoRecorder` streams raw BGR frames into an ffmpeg subprocess and
  collects the encoded container from its stdout as it is produced.
* `GifRecorder` grabs a fixed number of frames, halves them, quantizes each to
  an adaptive 256-color palette with Pillow and assembles a looping GIF.

`CaptureController` wraps both with the recording flag: one capture at a time,
fast failure when the surface or encoder is missing, and the flag always
cleared afterwards.
"""

from __future__ import annotations

import asyncio
import io
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

import cv2
import numpy as np
from PIL import Image
from tqdm import tqdm

from .config import CaptureSettings, capture_settings
from .engine import Globe
from .util import SnowglobeError, log, log_cmd, which_ffmpeg

Sleep = Callable[[float], Awaitable[None]]
Sink = Callable[[str, bytes], Optional[Path]]

READ_CHUNK = 1 << 16


class CaptureError(SnowglobeError):
    pass


class CaptureUnavailableError(CaptureError):
    pass


class EncoderError(CaptureError):
    pass


class CaptureBusyError(CaptureError):
    pass


@dataclass
class CaptureResult:
    ok: bool
    fmt: str
    path: Optional[Path] = None
    size_bytes: int = 0
    frames: int = 0
    error: Optional[str] = None


def export_name(scene_id: str, ext: str) -> str:
    return f"magic-globe-{scene_id.lower()}.{ext}"


def grab_frame(globe: Globe) -> np.ndarray:
    surface = globe.surface
    if surface is None:
        raise CaptureUnavailableError("No render surface attached")
    return surface.snapshot()


def downsample(frame: np.ndarray, scale: float) -> np.ndarray:
    """Resize to floor(W*scale) x floor(H*scale) with area averaging."""
    if scale == 1.0:
        return frame
    h, w = frame.shape[:2]
    tw = max(1, int(w * scale))
    th = max(1, int(h * scale))
    return cv2.resize(frame, (tw, th), interpolation=cv2.INTER_AREA)


# ============================================================
# GIF
# ============================================================


class GifDocument:
    """Growing animated GIF; every frame gets its own adaptive palette."""

    def __init__(self, colors: int = 256, loop: int = 0):
        self.colors = colors
        self.loop = loop
        self.frames: List[Image.Image] = []
        self.durations: List[int] = []

    def __len__(self) -> int:
        return len(self.frames)

    def add(self, frame_bgr: np.ndarray, delay_ms: int) -> None:
        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        img = Image.fromarray(rgb)
        indexed = img.quantize(colors=self.colors, method=Image.Quantize.MEDIANCUT)
        self.frames.append(indexed)
        self.durations.append(int(delay_ms))

    def finish(self) -> bytes:
        if not self.frames:
            raise EncoderError("GIF has no frames")
        buf = io.BytesIO()
        self.frames[0].save(
            buf,
            format="GIF",
            save_all=True,
            append_images=self.frames[1:],
            duration=self.durations,
            loop=self.loop,
            optimize=False,
        )
        return buf.getvalue()


class GifRecorder:
    def __init__(
        self,
        globe: Globe,
        settings: CaptureSettings,
        sleep: Sleep = asyncio.sleep,
        document_factory: Callable[[], GifDocument] = GifDocument,
        progress: bool = False,
    ):
        self.globe = globe
        self.settings = settings
        self._sleep = sleep
        self._document_factory = document_factory
        self.progress = progress
        self.frames_written = 0

    async def record(self) -> bytes:
        s = self.settings
        count = s.frame_count
        delay_ms = int(round(1000.0 / s.fps))
        doc = self._document_factory()
        log(f"gif: {count} frames @ {s.fps:g} fps, scale={s.scale:g}")
        try:
            for _ in tqdm(range(count), desc="gif", unit="frame", disable=not self.progress):
                small = downsample(grab_frame(self.globe), s.scale)
                doc.add(small, delay_ms)
                self.frames_written += 1
                await self._sleep(delay_ms / 1000.0)
            return doc.finish()
        except CaptureError:
            raise
        except Exception as exc:
            raise EncoderError(f"GIF encode failed: {exc}") from exc


# ============================================================
# Video
# ============================================================


def build_video_encoder_cmd(ffmpeg: str, width: int, height: int, fps: float, settings: CaptureSettings) -> list[str]:
    cmd = [
        ffmpeg,
        "-hide_banner",
        "-loglevel",
        "error",
        "-f",
        "rawvideo",
        "-pix_fmt",
        "bgr24",
        "-s",
        f"{width}x{height}",
        "-r",
        f"{fps:.6f}",
        "-i",
        "-",
        "-an",
        "-vf",
        "pad=ceil(iw/2)*2:ceil(ih/2)*2",
        "-c:v",
        settings.encoder,
    ]
    if settings.encoder == "libvpx-vp9":
        cmd += ["-b:v", "0", "-crf", str(settings.crf), "-deadline", "realtime"]
    elif settings.encoder in {"libx264", "libx265"}:
        cmd += ["-crf", str(settings.crf), "-preset", "veryfast"]
    cmd += ["-pix_fmt", "yuv420p"]

    if settings.fmt == "mp4":
        cmd += ["-movflags", "frag_keyframe+empty_moov", "-f", "mp4"]
    else:
        cmd += ["-f", "webm"]
    cmd += ["pipe:1"]
    return cmd


class VideoRecorder:
    def __init__(
        self,
        globe: Globe,
        settings: CaptureSettings,
        sleep: Sleep = asyncio.sleep,
        ffmpeg: Optional[str] = None,
        spawn=asyncio.create_subprocess_exec,
        progress: bool = False,
    ):
        self.globe = globe
        self.settings = settings
        self._sleep = sleep
        self._spawn = spawn
        self.progress = progress
        self.ffmpeg = ffmpeg or which_ffmpeg()
        self.frames_written = 0

    def check(self) -> None:
        if not self.ffmpeg:
            raise CaptureUnavailableError("ffmpeg not found on PATH. Install ffmpeg (or add it to PATH).")

    async def record(self) -> bytes:
        self.check()
        s = self.settings
        first = downsample(grab_frame(self.globe), s.scale)
        h, w = first.shape[:2]
        cmd = build_video_encoder_cmd(self.ffmpeg, w, h, s.fps, s)
        log_cmd(cmd)

        try:
            proc = await self._spawn(
                *cmd,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise EncoderError(f"could not start ffmpeg: {exc}") from exc
        chunks: List[bytes] = []

        async def drain_stdout() -> None:
            while True:
                chunk = await proc.stdout.read(READ_CHUNK)
                if not chunk:
                    return
                chunks.append(chunk)

        reader = asyncio.ensure_future(drain_stdout())
        errors = asyncio.ensure_future(proc.stderr.read())
        finished = False
        try:
            frame = first
            for i in tqdm(range(s.frame_count), desc=s.fmt, unit="frame", disable=not self.progress):
                if i > 0:
                    frame = downsample(grab_frame(self.globe), s.scale)
                    if frame.shape[:2] != (h, w):
                        frame = cv2.resize(frame, (w, h), interpolation=cv2.INTER_AREA)
                try:
                    proc.stdin.write(np.ascontiguousarray(frame).tobytes())
                    await proc.stdin.drain()
                except (BrokenPipeError, ConnectionResetError) as exc:
                    raise EncoderError(f"ffmpeg closed its input: {exc}") from exc
                self.frames_written += 1
                await self._sleep(1.0 / s.fps)

            proc.stdin.close()
            rc = await proc.wait()
            await reader
            stderr = await errors
            if rc != 0:
                tail = stderr.decode("utf-8", "replace").strip()[-400:]
                raise EncoderError(f"ffmpeg exited with code {rc}: {tail}")
            finished = True
            return b"".join(chunks)
        except CaptureError:
            raise
        except Exception as exc:
            raise EncoderError(f"video encode failed: {exc}") from exc
        finally:
            if not finished and proc.returncode is None:
                proc.kill()
                await proc.wait()
            for t in (reader, errors):
                if not t.done():
                    t.cancel()


# ============================================================
# Controller
# ============================================================


def directory_sink(out_dir: Path) -> Sink:
    """Write each export into `out_dir`; the file only appears once fully written."""
    out_dir = Path(out_dir)

    def write(name: str, data: bytes) -> Path:
        out_dir.mkdir(parents=True, exist_ok=True)
        target = out_dir / name
        fd, tmp = tempfile.mkstemp(prefix=".snowglobe_", dir=out_dir)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp, target)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        return target

    return write


class CaptureController:
    def __init__(
        self,
        globe: Globe,
        out_dir: "Path | str" = ".",
        sink: Optional[Sink] = None,
        sleep: Sleep = asyncio.sleep,
        ffmpeg: Optional[str] = None,
        spawn=asyncio.create_subprocess_exec,
        gif_document: Callable[[], GifDocument] = GifDocument,
        progress: bool = False,
    ):
        self.globe = globe
        self.sink: Sink = sink or directory_sink(Path(out_dir))
        self._sleep = sleep
        self._ffmpeg = ffmpeg
        self._spawn = spawn
        self._gif_document = gif_document
        self.progress = progress
        self.is_recording = False

    def recorder_for(self, settings: CaptureSettings):
        if settings.fmt == "gif":
            return GifRecorder(self.globe, settings, self._sleep, self._gif_document, self.progress)
        rec = VideoRecorder(self.globe, settings, self._sleep, self._ffmpeg, self._spawn, self.progress)
        rec.check()
        return rec

    async def capture(self, fmt: str = "gif", **overrides) -> CaptureResult:
        if self.is_recording:
            err = CaptureBusyError("A capture is already in progress")
            log(f"capture refused: {err}")
            return CaptureResult(False, fmt, error=str(err))

        self.is_recording = True
        recorder = None
        try:
            if self.globe.surface is None:
                raise CaptureUnavailableError("No render surface attached")
            settings = capture_settings(fmt, **overrides)
            recorder = self.recorder_for(settings)
            data = await recorder.record()
            name = export_name(self.globe.scene_id.value, settings.extension)
            path = self.sink(name, data)
            log(f"saved {name} ({len(data)} bytes, {recorder.frames_written} frames)")
            return CaptureResult(True, fmt, path, len(data), recorder.frames_written)
        except (CaptureError, OSError, ValueError) as exc:
            log(f"capture failed: {exc}")
            frames = recorder.frames_written if recorder is not None else 0
            return CaptureResult(False, fmt, frames=frames, error=str(exc))
        finally:
            self.is_recording = False

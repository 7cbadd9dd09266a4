"""Phase cue synthesis and playback using numpy + QSoundEffect.

Cues are generated as sine tones shaped by ADSR envelopes, written to
WAV files once and cached on disk.

Cue names
---------
- ``work_start``       bright ascending triad, "let's go"
- ``work_complete``    four-note arpeggio resolving upward
- ``break_start``      soft bell with an octave overtone
- ``break_complete``   two quick taps then a rising fifth
"""

from __future__ import annotations

import io
import wave
from pathlib import Path
from typing import Callable

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_SUPPORT_DIR


SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

CUE_NAMES = (
    "work_start",
    "work_complete",
    "break_start",
    "break_complete",
)

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope, all durations in samples."""
    env = np.full(length, sustain_level, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    r_start = max(length - release, d_end)
    if r_start < length:
        env[r_start:] = np.linspace(env[r_start - 1] if r_start else 1.0, 0.0, length - r_start)
    return env


def _tone(freq: float, seconds: float, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(int(SAMPLE_RATE * seconds)) / SAMPLE_RATE
    return amplitude * np.sin(2 * np.pi * freq * t)


def _silence(seconds: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * seconds))


def _notes(
    freqs: list[float],
    note_s: float,
    gap_s: float,
    *,
    amplitude: float = 0.5,
    tail_s: float = 0.0,
) -> np.ndarray:
    """Play *freqs* one after another, the last one held for *tail_s* extra."""
    parts: list[np.ndarray] = []
    for i, freq in enumerate(freqs):
        last = i == len(freqs) - 1
        tone = _tone(freq, note_s + (tail_s if last else 0.0), amplitude)
        release = len(tone) // 2 if last else len(tone) // 3
        parts.append(tone * _envelope(len(tone), attack=80, decay=200,
                                      sustain_level=0.45, release=release))
        if not last:
            parts.append(_silence(gap_s))
    return np.concatenate(parts)


def to_wav_bytes(samples: np.ndarray) -> bytes:
    """float64 samples in -1..1 → mono 16-bit PCM WAV."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(pcm.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  CUE GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def generate_work_start() -> bytes:
    # C5 E5 G5
    samples = _notes([523.25, 659.25, 783.99], 0.12, 0.03, amplitude=0.6)
    return to_wav_bytes(np.concatenate([samples, _silence(0.05)]))


def generate_work_complete() -> bytes:
    # C5 E5 G5 C6, last note rings out
    samples = _notes([523.25, 659.25, 783.99, 1046.50], 0.10, 0.02, tail_s=0.25)
    return to_wav_bytes(samples)


def generate_break_start() -> bytes:
    seconds = 1.0
    bell = _tone(440.0, seconds, 0.35) + _tone(880.0, seconds, 0.08)
    env = _envelope(
        len(bell),
        attack=int(SAMPLE_RATE * 0.08),
        decay=int(SAMPLE_RATE * 0.3),
        sustain_level=0.25,
        release=int(SAMPLE_RATE * 0.55),
    )
    return to_wav_bytes(bell * env)


def generate_break_complete() -> bytes:
    tap = _tone(800.0, 0.04, 0.35)
    tap = tap * _envelope(len(tap), attack=40, decay=100, sustain_level=0.2, release=200)
    # A4 → E5
    rise = _notes([440.0, 659.25], 0.12, 0.02, amplitude=0.45, tail_s=0.15)
    return to_wav_bytes(np.concatenate([tap, _silence(0.08), tap, _silence(0.12), rise]))


GENERATORS: dict[str, Callable[[], bytes]] = {
    "work_start": generate_work_start,
    "work_complete": generate_work_complete,
    "break_start": generate_break_start,
    "break_complete": generate_break_complete,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Synthesises, caches and plays the phase cues.

    Whether a cue *should* play is the dispatcher's decision; the manager
    plays whatever it is asked to.
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
        volume: int = 70,
    ) -> None:
        super().__init__(parent)
        self._volume = max(0, min(volume, 100)) / 100.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    @property
    def sounds_dir(self) -> Path:
        return self._sounds_dir

    @property
    def volume(self) -> int:
        return round(self._volume * 100)

    def set_volume(self, level: int) -> None:
        """Set volume (0-100) on every loaded effect."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def effect(self, name: str) -> QSoundEffect | None:
        return self._effects.get(name)

    def play(self, name: str) -> None:
        """Play a cue.

        Raises ``KeyError`` for an unknown cue and ``RuntimeError`` when
        the backend reported the cue as unplayable.
        """
        effect = self._effects[name]
        if effect.status() == QSoundEffect.Status.Error:
            raise RuntimeError(f"Sound cue {name!r} failed to load")
        effect.play()

    def _ensure_wav_files(self) -> None:
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for name, generate in GENERATORS.items():
            path = self._sounds_dir / f"{name}.wav"
            if not path.exists():
                path.write_bytes(generate())

    def _load_effects(self) -> None:
        for name in CUE_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            effect = QSoundEffect(self)
            effect.setSource(QUrl.fromLocalFile(str(path)))
            effect.setVolume(self._volume)
            self._effects[name] = effect

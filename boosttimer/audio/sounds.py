"""Completion sounds, synthesised with numpy and played via QSoundEffect.

Each sound is built from sine tones shaped by an ADSR envelope, written
once as a WAV file into the app's cache directory and loaded from there.

Sound names
-----------
- ``todo_complete``   — two-note chime when a queued task runs out
- ``timer_complete``  — rising arpeggio when a countdown hits zero
- ``queue_complete``  — longer fanfare when the whole queue is done
- ``click``           — subtle button click
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_SUPPORT_DIR

logger = logging.getLogger(__name__)

SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = (
    "todo_complete",
    "timer_complete",
    "queue_complete",
    "click",
)

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope (all durations in samples)."""
    env = np.full(length, sustain_level, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    r_start = max(length - release, d_end)
    if r_start < length:
        env[r_start:] = np.linspace(env[r_start - 1] if r_start else sustain_level, 0.0, length - r_start)
    return env


def _tone(freq: float, duration_s: float, amplitude: float = 0.5) -> np.ndarray:
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t) * amplitude


def _silence(duration_s: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * duration_s))


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Float samples in -1..1 → mono 16-bit PCM WAV."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(pcm.tobytes())
    return buf.getvalue()


def _sequence(notes: list[tuple[float, float]], gap: float, amplitude: float) -> np.ndarray:
    parts: list[np.ndarray] = []
    for freq, dur in notes:
        tone = _tone(freq, dur, amplitude)
        parts.append(tone * _envelope(len(tone), attack=80, decay=240, sustain_level=0.4, release=int(len(tone) * 0.4)))
        parts.append(_silence(gap))
    return np.concatenate(parts)


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_todo_chime() -> bytes:
    """E5 → A5, short and light."""
    return _to_wav_bytes(_sequence([(659.25, 0.12), (880.00, 0.22)], gap=0.03, amplitude=0.5))


def _generate_timer_arpeggio() -> bytes:
    """C5 → E5 → G5 → C6 with a held top note."""
    notes = [(523.25, 0.10), (659.25, 0.10), (783.99, 0.10), (1046.50, 0.40)]
    return _to_wav_bytes(_sequence(notes, gap=0.02, amplitude=0.5))


def _generate_queue_fanfare() -> bytes:
    """G4 → B4 → D5 → G5 over a soft fifth drone."""
    melody = _sequence(
        [(392.00, 0.15), (493.88, 0.15), (587.33, 0.15), (783.99, 0.50)],
        gap=0.03,
        amplitude=0.45,
    )
    t = np.arange(len(melody)) / SAMPLE_RATE
    drone = np.sin(2 * np.pi * 196.00 * t) * 0.12
    drone = drone * _envelope(len(drone), attack=2000, decay=4000, sustain_level=0.6, release=8000)
    return _to_wav_bytes(melody + drone)


def _generate_click() -> bytes:
    """2 kHz, 15 ms."""
    tone = _tone(2000.0, 0.015, 0.3)
    return _to_wav_bytes(tone * _envelope(len(tone), attack=20, decay=100, sustain_level=0.1, release=300))


_GENERATORS = {
    "todo_complete": _generate_todo_chime,
    "timer_complete": _generate_timer_arpeggio,
    "queue_complete": _generate_queue_fanfare,
    "click": _generate_click,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Caches the generated WAVs and plays them by name.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(60)
        mgr.play("timer_complete")
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.6  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> None:
        """Play a sound by name.  No-op if disabled or name unknown."""
        if not self._enabled:
            return
        effect = self._effects.get(name)
        if effect is None:
            logger.debug("No sound loaded for %r", name)
            return
        effect.play()

    @property
    def volume(self) -> int:
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        try:
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
            for name, gen_fn in _GENERATORS.items():
                path = self._sounds_dir / f"{name}.wav"
                if not path.exists():
                    path.write_bytes(gen_fn())
        except OSError:
            logger.exception("Could not write sound cache in %s", self._sounds_dir)

    def _load_effects(self) -> None:
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect

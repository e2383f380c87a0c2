"""
Alert and alarm sounds.

play_alarm() is the celebration sound: a bundled/configured file played at
full volume through whatever the platform offers, independent of the
desktop's notification "do not disturb" state. play_default_alert() is the
notification channel's default sound.

Volume limits per platform:
  Linux    paplay/mpv/ffplay get their maximum stream volume.
  macOS    afplay -v 1.0 is full stream volume, still scaled by the
           system output volume.
  Windows  winsound has no volume control; the alarm plays at the current
           system volume and is silent while the system is muted.
"""

import subprocess
import sys
from pathlib import Path

from .config import log
from .errors import AssetError

_IS_WIN = sys.platform == "win32"
_IS_MAC = sys.platform == "darwin"

# Tried in order; first one installed wins. Volume flags are "maximum".
_LINUX_PLAYERS = (
    ("paplay", "--volume=65536"),
    ("mpv", "--no-terminal", "--no-video", "--volume=100"),
    ("ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet", "-volume", "100"),
    ("aplay", "-q"),
)

_LINUX_ALERTS = (
    ("paplay", "/usr/share/sounds/freedesktop/stereo/message.oga"),
    ("aplay", "-q", "/usr/share/sounds/sound-icons/prompt.wav"),
)


def play_alarm(sound_file):
    """
    Start the alarm sound asynchronously. Returns the player process (or None
    on Windows, where winsound plays in-process). Raises AssetError if the
    file is missing or no player can be started.
    """
    if not sound_file:
        raise AssetError("no celebration sound configured")
    path = Path(sound_file)
    if not path.is_file():
        raise AssetError(f"sound file not found: {path}")

    if _IS_WIN:
        import winsound
        try:
            winsound.PlaySound(str(path), winsound.SND_FILENAME | winsound.SND_ASYNC)
        except RuntimeError as e:
            raise AssetError(f"cannot play {path.name}: {e}") from e
        return None

    if _IS_MAC:
        commands = (("afplay", "-v", "1.0"),)
    else:
        commands = _LINUX_PLAYERS

    for cmd in commands:
        try:
            proc = subprocess.Popen(
                [*cmd, str(path)],
                stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL,
            )
            log.info("Alarm sound started via %s", cmd[0])
            return proc
        except FileNotFoundError:
            continue
    raise AssetError("no audio player available for alarm sound")


def stop(proc):
    if proc is None:
        if _IS_WIN:
            import winsound
            winsound.PlaySound(None, 0)
        return
    if proc.poll() is None:
        proc.terminate()


def play_default_alert():
    """Best-effort system alert sound. Never raises."""
    try:
        if _IS_WIN:
            import winsound
            winsound.PlaySound("SystemExclamation", winsound.SND_ALIAS | winsound.SND_ASYNC)
            return True
        if _IS_MAC:
            subprocess.Popen(["afplay", "/System/Library/Sounds/Glass.aiff"])
            return True
        for cmd in _LINUX_ALERTS:
            try:
                subprocess.Popen(list(cmd), stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
                return True
            except FileNotFoundError:
                continue
    except (OSError, RuntimeError) as e:
        log.warning("Alert sound failed: %s", e)
    return False

"""
Audio module - Recording capture, file intake and processing utilities.
"""

from .capture import AudioCapture, BrowserMicrophone, CapturedAudio, CaptureState
from .intake import AudioIntake, validate_audio_file
from .processor import AudioProcessor, measure_duration

__all__ = [
    "AudioCapture",
    "AudioIntake",
    "AudioProcessor",
    "BrowserMicrophone",
    "CaptureState",
    "CapturedAudio",
    "measure_duration",
    "validate_audio_file",
]

"""Type definitions for the Solfege Tuner project."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DetectionState:
    """The detection result published to the presentation layer."""

    pitch_display: str  # Frequency formatted to 2 decimal places (e.g., '440.00')
    note: str  # Note name with octave (e.g., 'A4', 'Eb3')
    syllable: str  # Solfege syllable relative to the root (e.g., 'la')
    frequency: float = 0.0  # Raw estimate in Hz
    root: str = "C"  # Root the syllable was computed against
    timestamp: float = 0.0  # Pacer timestamp of the tick that produced it

    def __str__(self):
        return f"{self.note} {self.pitch_display} Hz {self.syllable}"


INITIAL_STATE = DetectionState(
    pitch_display="261.63", note="C", syllable="do", frequency=261.63, root="C"
)

"""Utility functions for working with musical notes and frequencies."""

import math
import re
from typing import Dict, List, Tuple

import numpy as np


# Standard reference: A4 = 440Hz, MIDI note 69
A4_FREQUENCY = 440.0
A4_MIDI = 69

FLAT_NOTES: List[str] = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]
SHARP_NOTES: List[str] = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

SHARP_TO_FLAT: Dict[str, str] = {
    "C#": "Db",
    "D#": "Eb",
    "F#": "Gb",
    "G#": "Ab",
    "A#": "Bb",
}

# Spellings that land on a natural note
ENHARMONIC_NATURALS: Dict[str, str] = {
    "B#": "C",
    "E#": "F",
    "Cb": "B",
    "Fb": "E",
}

# Pitch class (A-G, optional # or b) followed by an optional signed octave
NOTE_PATTERN = re.compile(r"^([A-Ga-g][#b]?)(-?[0-9]*)$")


def get_note_name(freq: float, use_flats: bool = True) -> str:
    """Convert frequency to note name using Scientific Pitch Notation (SPN).

    Args:
        freq: Frequency in Hz
        use_flats: If True (default), spell accidentals as flats (e.g., 'Bb'),
                   otherwise as sharps (e.g., 'A#')

    Returns:
        Note name with octave in SPN (e.g., 'A4', 'Db4', 'Bb3')

    Raises:
        ValueError: If the frequency is not a positive finite number

    Note:
        - Middle C is C4 (261.63 Hz)
        - Exact half-semitone ties round up to the higher note
    """
    try:
        freq = float(freq)
    except (TypeError, ValueError):
        raise ValueError(f"Frequency must be a number, got {freq!r}")
    if not np.isfinite(freq) or freq <= 0:
        raise ValueError(f"Frequency must be a positive finite number, got {freq!r}")

    half_steps = math.floor(12 * np.log2(freq / A4_FREQUENCY) + 0.5)
    midi_number = A4_MIDI + half_steps

    # SPN octave calculation (C4 is middle C)
    octave = (midi_number // 12) - 1
    names = FLAT_NOTES if use_flats else SHARP_NOTES
    return f"{names[midi_number % 12]}{octave}"


def split_note(note_name: str) -> Tuple[str, str]:
    """Split a note name into its pitch class and octave parts.

    Args:
        note_name: Note with or without octave (e.g., 'Eb4', 'C#', 'a-1')

    Returns:
        Tuple of (pitch class, octave string); the octave is '' when absent

    Raises:
        ValueError: If the string is not a note name
    """
    match = NOTE_PATTERN.match(str(note_name).strip())
    if not match:
        raise ValueError(f"Invalid note name: {note_name!r}")
    pitch_class, octave = match.groups()
    return pitch_class[0].upper() + pitch_class[1:], octave


def normalize_to_flat(pitch_class: str) -> str:
    """Convert a pitch class to its flat chromatic spelling.

    Examples:
        >>> normalize_to_flat('F#')
        'Gb'
        >>> normalize_to_flat('E#')
        'F'
    """
    if pitch_class in SHARP_TO_FLAT:
        return SHARP_TO_FLAT[pitch_class]
    return ENHARMONIC_NATURALS.get(pitch_class, pitch_class)

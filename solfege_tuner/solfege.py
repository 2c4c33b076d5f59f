"""Movable-doh solfege mapping over the 12-tone chromatic scale."""

from typing import List

from .note_utils import FLAT_NOTES, normalize_to_flat, split_note

# Flat chromatic scale; every rotated scale is spelled with these names
FLAT_CHROMATICS: List[str] = list(FLAT_NOTES)

# One syllable per semitone above the root
SOLFEGE_SYLLABLES: List[str] = [
    "do",
    "ra",
    "re",
    "me",
    "mi",
    "fa",
    "se",
    "sol",
    "le",
    "la",
    "te",
    "ti",
]


class SolfegeMappingError(LookupError):
    """A pitch class could not be located in the rotated chromatic scale.

    This means the chromatic and syllable tables are out of sync, or the
    caller passed something that is not a note. It is never a valid
    "no syllable" result.
    """


def normalize_root(root: str) -> str:
    """Normalize a root note to its flat chromatic spelling.

    Args:
        root: Root note in flat, sharp or natural spelling (e.g., 'Eb', 'D#', 'd')

    Returns:
        The flat pitch class (e.g., 'Eb')

    Raises:
        ValueError: If the root is not one of the 12 pitch classes, or carries an octave
    """
    pitch_class, octave = split_note(root)
    if octave:
        raise ValueError(f"Root note must not include an octave: {root!r}")

    flat = normalize_to_flat(pitch_class)
    if flat not in FLAT_CHROMATICS:
        raise ValueError(f"Unknown root note: {root!r}")
    return flat


def get_chromatic_scale(root: str) -> List[str]:
    """Return the flat chromatic scale starting from the root note.

    Args:
        root: Root of the scale, flat or sharp spelling

    Returns:
        12 flat pitch classes, a rotation of FLAT_CHROMATICS with the root first

    Examples:
        >>> get_chromatic_scale('D')
        ['D', 'Eb', 'E', 'F', 'Gb', 'G', 'Ab', 'A', 'Bb', 'B', 'C', 'Db']
    """
    start_index = FLAT_CHROMATICS.index(normalize_root(root))
    size = len(FLAT_CHROMATICS)
    return [FLAT_CHROMATICS[(start_index + i) % size] for i in range(size)]


def get_solfege(note: str, root: str) -> str:
    """Get the solfege syllable of a detected note relative to the root.

    e.g. Eb4 with a root of C is "me".

    Args:
        note: Detected note, with or without octave (e.g., 'Eb4')
        root: Root of the scale

    Returns:
        The syllable at the note's position in the root's chromatic scale

    Raises:
        SolfegeMappingError: If the note's pitch class is not in the scale
        ValueError: If the root is invalid
    """
    chromatic_scale = get_chromatic_scale(root)

    try:
        pitch_class, _octave = split_note(note)
    except ValueError as e:
        raise SolfegeMappingError(f"Cannot map {note!r} to a pitch class") from e

    clean_note = normalize_to_flat(pitch_class)
    if clean_note not in chromatic_scale:
        raise SolfegeMappingError(
            f"Pitch class {clean_note!r} of {note!r} not found in {chromatic_scale}"
        )

    note_index = chromatic_scale.index(clean_note)
    if note_index >= len(SOLFEGE_SYLLABLES):
        raise SolfegeMappingError(
            f"Index {note_index} outside the syllable table for {note!r}"
        )
    return SOLFEGE_SYLLABLES[note_index]

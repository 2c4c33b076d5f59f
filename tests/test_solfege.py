import unittest

from solfege_tuner.solfege import (
    FLAT_CHROMATICS,
    SOLFEGE_SYLLABLES,
    SolfegeMappingError,
    get_chromatic_scale,
    get_solfege,
    normalize_root,
)


class TestChromaticScale(unittest.TestCase):
    def test_c_scale(self):
        self.assertEqual(
            get_chromatic_scale("C"),
            ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"],
        )

    def test_d_scale_wraps_around(self):
        self.assertEqual(
            get_chromatic_scale("D"),
            ["D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B", "C", "Db"],
        )

    def test_sharp_root_uses_flat_spelling(self):
        self.assertEqual(get_chromatic_scale("C#"), get_chromatic_scale("Db"))
        self.assertEqual(get_chromatic_scale("F#")[0], "Gb")

    def test_every_root_is_a_rotation(self):
        for root in FLAT_CHROMATICS:
            scale = get_chromatic_scale(root)
            self.assertEqual(len(scale), 12)
            self.assertEqual(scale[0], root)
            start = FLAT_CHROMATICS.index(root)
            self.assertEqual(scale, FLAT_CHROMATICS[start:] + FLAT_CHROMATICS[:start])

    def test_repeated_calls_are_identical(self):
        first = get_chromatic_scale("Ab")
        for _ in range(5):
            self.assertEqual(get_chromatic_scale("Ab"), first)
        # The canonical table is never mutated by rotation
        self.assertEqual(FLAT_CHROMATICS[0], "C")

    def test_invalid_roots(self):
        for root in ("H", "", "C4", "Dbb"):
            with self.assertRaises(ValueError):
                get_chromatic_scale(root)

    def test_normalize_root(self):
        self.assertEqual(normalize_root("d#"), "Eb")
        self.assertEqual(normalize_root(" Bb "), "Bb")
        self.assertEqual(normalize_root("B#"), "C")


class TestSolfege(unittest.TestCase):
    def test_c_major(self):
        self.assertEqual(get_solfege("C4", "C"), "do")
        self.assertEqual(get_solfege("Eb4", "C"), "me")
        self.assertEqual(get_solfege("A3", "C"), "la")
        self.assertEqual(get_solfege("B2", "C"), "ti")

    def test_movable_doh(self):
        self.assertEqual(get_solfege("D4", "D"), "do")
        self.assertEqual(get_solfege("C5", "D"), "te")
        self.assertEqual(get_solfege("Gb3", "F#"), "do")

    def test_octave_is_ignored(self):
        self.assertEqual(get_solfege("G1", "C"), get_solfege("G7", "C"))
        self.assertEqual(get_solfege("G", "C"), "sol")

    def test_sharp_note_spelling(self):
        self.assertEqual(get_solfege("C#4", "C"), "ra")

    def test_each_semitone_gets_its_own_syllable(self):
        for root in FLAT_CHROMATICS:
            syllables = [get_solfege(f"{note}4", root) for note in FLAT_CHROMATICS]
            self.assertEqual(sorted(syllables), sorted(SOLFEGE_SYLLABLES))
            self.assertEqual(get_solfege(f"{root}4", root), "do")

    def test_unknown_note_is_a_mapping_defect(self):
        with self.assertRaises(SolfegeMappingError):
            get_solfege("H4", "C")
        with self.assertRaises(LookupError):
            get_solfege("---", "C")


if __name__ == "__main__":
    unittest.main()

import unittest

from solfege_tuner.core.events import DetectionEvents, EventEmitter
from solfege_tuner.note_types import DetectionState


class TestEventEmitter(unittest.TestCase):
    def test_emit_to_listeners(self):
        emitter = EventEmitter()
        received = []
        emitter.on("tick", received.append)
        emitter.emit("tick", 1)
        emitter.emit("other", 2)
        self.assertEqual(received, [1])

    def test_listener_registered_once(self):
        emitter = EventEmitter()
        received = []
        emitter.on("tick", received.append)
        emitter.on("tick", received.append)
        emitter.emit("tick", 1)
        self.assertEqual(received, [1])

    def test_failing_listener_does_not_stop_others(self):
        emitter = EventEmitter()
        received = []

        def broken(value):
            raise RuntimeError("boom")

        emitter.on("tick", broken)
        emitter.on("tick", received.append)
        emitter.emit("tick", 1)
        self.assertEqual(received, [1])

    def test_off_and_clear(self):
        emitter = EventEmitter()
        received = []
        emitter.on("tick", received.append)
        emitter.off("tick", received.append)
        emitter.emit("tick", 1)
        emitter.on("tick", received.append)
        emitter.clear()
        emitter.emit("tick", 2)
        self.assertEqual(received, [])


class TestDetectionEvents(unittest.TestCase):
    def test_typed_events(self):
        events = DetectionEvents()
        states, flags, errors = [], [], []
        events.on_state_published(states.append)
        events.on_active_changed(flags.append)
        events.on_capture_failed(errors.append)

        state = DetectionState(pitch_display="440.00", note="A4", syllable="la", frequency=440.0)
        error = RuntimeError("no device")
        events.emit_state_published(state)
        events.emit_active_changed(True)
        events.emit_capture_failed(error)

        self.assertEqual(states, [state])
        self.assertEqual(flags, [True])
        self.assertEqual(errors, [error])
        self.assertEqual(str(state), "A4 440.00 Hz la")


if __name__ == "__main__":
    unittest.main()

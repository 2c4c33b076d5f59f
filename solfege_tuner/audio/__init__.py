"""Audio capture sessions.

The concrete sessions are imported from their modules directly so that
sounddevice (and its PortAudio dependency) is only loaded when live capture
is actually used.
"""

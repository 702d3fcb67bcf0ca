"""On-device side of Plainly: local store, playback, and the processing client."""

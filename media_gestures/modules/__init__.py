"""Engine building blocks: detection, recognition, control and utilities."""

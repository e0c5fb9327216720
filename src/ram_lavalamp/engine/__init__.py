"""Animation-state engine — classification, timing, scaling and compositing."""

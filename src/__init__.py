"""
Gesture Particle Morph
=======================

A webcam hand-gesture driven particle system: the pose of one hand picks a
target shape (a sphere, a word or a scatter cloud) and a few thousand
particles ease into it every frame.

Modules:
    - detection: hand landmark types and the MediaPipe adapter
    - recognition: gesture classification, gesture tables, throttling
    - particles: shape generation, morph engine, rotation
    - control: per-frame glue from landmarks to the particle engine
    - utils: config, logging, interpolation, performance, rendering
"""

__version__ = "1.0.0"

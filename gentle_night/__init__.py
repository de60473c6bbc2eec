# Do Not Go Gentle - Gesture-Driven Image Particles
# Version: 1.0.0

"""
Core modules for the gesture-driven particle sketch:
- sampler: Image to grid sample points
- gesture_logic: Grip detection from hand landmarks
- particles: Particle field physics
- gallery: Image rotation timer and background loading
- camera: Webcam stream handler
- hand_tracking: MediaPipe hand landmark detection
- renderer: Canvas drawing
- ui: Main application loop
"""

__version__ = "1.0.0"

"""
Real-time Interface Module

Provides the webcam session runner and offline recording replay.
"""

from .replay import load_openness_recording, replay_recording

__all__ = ['load_openness_recording', 'replay_recording']

"""Real-time exercise form scoring and rep counting from 2D keypoints."""

__version__ = "0.1.0"

"""Discover, launch, probe and shut down Bevy apps and examples over the Bevy Remote Protocol."""

__version__ = "0.1.0"
__all__ = ["apps", "brp", "cargo_detector", "launch_log", "process", "scanning"]
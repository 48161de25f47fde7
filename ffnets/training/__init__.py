"""Training loops, error functions and configuration-driven runs."""

from .losses import Error
from .trainer import NetworkTrainer, TrainingConfiguration

__all__ = ["Error", "NetworkTrainer", "TrainingConfiguration"]

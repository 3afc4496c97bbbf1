"""BoostTimer — countdown and todo-queue desktop timer."""

__version__ = "0.1.0"

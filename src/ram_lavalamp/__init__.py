"""RAM Lava Lamp — a desktop lava lamp whose colour and pace follow memory usage."""

__version__ = "0.1.0"

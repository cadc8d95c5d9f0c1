"""chunkscribe: transcribe long recordings by splitting them into overlapping chunks."""

__version__ = "0.1.0"

"""Find Gradle projects and run their clean task."""

__version__ = "0.3.0"

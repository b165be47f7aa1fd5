"""Search, task execution and accounting."""

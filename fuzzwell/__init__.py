"""Web fuzzing building blocks: inputs, filters and matchers, an HTTP runner, scrapers and report writers."""

__version__ = "2.0.0"
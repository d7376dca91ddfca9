"""GlassOps governance runtime for CI deployment pipelines."""

__version__ = "1.0.0"

"""blogship: build and publish a static blog from CI.

A blog is a tree of Markdown posts with YAML front matter. blogship checks
that tree, drives an external static site generator over it, and mirrors
the generated site into a separate hosting repository.

The main entry point is the CLI module, which provides the verify and
publish jobs, a ``ci`` command that picks the right job for the current
branch, and a helper for starting new posts.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"

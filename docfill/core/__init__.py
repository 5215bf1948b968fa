"""Core plumbing: errors, logging, paths and the fill pipeline."""

"""Service layer: extraction, matching, population and artifact output."""

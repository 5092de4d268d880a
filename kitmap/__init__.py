"""kitmap: concept-map diagnosis and analytics engine."""

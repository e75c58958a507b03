"""HTTP API for reviewing and resolving missed pages."""

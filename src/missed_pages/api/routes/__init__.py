"""Router modules for the missed-pages API."""

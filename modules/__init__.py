"""Domain modules: the panel proxy, its reaction logic and the log store."""

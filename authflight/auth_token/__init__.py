"""Session refresh: the refresh call and the single-flight coordinator."""

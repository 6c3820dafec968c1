"""Session identity surface: models, store, navigation and auth workflows."""

"""Built-in plugins shipped with basketctl."""

"""Domain layer: catalog access, navigation and the two skill protocols."""

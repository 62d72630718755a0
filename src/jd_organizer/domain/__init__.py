"""Domain layer: result types and repository interfaces."""

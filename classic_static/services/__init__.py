"""Request handling stages: resolve, match index, negotiate cache, stream, list."""

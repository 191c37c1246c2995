"""Infrastructure: database engine, logging and event bus."""

"""Infrastructure: database engine and repositories."""

"""Infrastructure: backend client, local storage and logging."""

"""Built-in CLI sub-command groups (``credentials``, ``endpoints``)."""

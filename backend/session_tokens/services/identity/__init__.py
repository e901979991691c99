"""Identity provider: account creation, lookup and password verification."""

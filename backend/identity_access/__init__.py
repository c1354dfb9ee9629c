"""Identity and access: users, credentials, identity resolution and role checks."""

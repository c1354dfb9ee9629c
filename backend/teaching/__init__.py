"""Teaching context: courses, assignments, submissions and their indexes."""

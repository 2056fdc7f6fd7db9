# Command-line scripts (seed data)

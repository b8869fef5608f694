"""
High-level use cases for the person directory.

Services orchestrate a PersonRepository to implement business rules
(existence checks before mutations, CSV import/export). Routers and the CLI
scripts call these services instead of touching a backend directly.
"""

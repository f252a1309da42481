"""
Generators — produce project files from the resolved configuration.

Generators are pure: configuration in, text out. They know nothing
about the pipeline, the ledger or the filesystem.
"""

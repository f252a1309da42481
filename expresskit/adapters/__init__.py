"""
Adapters — the engine's only contact with the outside world
(shell commands, the filesystem, interactive prompts).
"""

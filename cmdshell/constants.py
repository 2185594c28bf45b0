"""
Shell-wide constants and defaults.
"""

DEFAULT_PROMPT = "> "
DEFAULT_HELP_TOKENS = ("?", "help")

# Separator between aliases in help output
ALIAS_SEPARATOR = ", "

# Maximum config file size (1MB)
MAX_CONFIG_SIZE_BYTES = 1024 * 1024
